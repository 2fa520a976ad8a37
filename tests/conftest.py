"""
Shared fixtures for springlink tests.
"""
import pytest

from springlink import Domain, Node, SpringElement


def make_domain(*nodes):
    domain = Domain()
    for node in nodes:
        domain.add_node(node)
    return domain


@pytest.fixture
def domain_2d():
    """Two 2D nodes with 2 DOF each: A=(0,0), B=(3,0)."""
    return make_domain(Node(1, (0.0, 0.0), ndf=2), Node(2, (3.0, 0.0), ndf=2))


@pytest.fixture
def domain_2d_frame():
    """Two 2D nodes with 3 DOF each (ux, uy, rz), 2 m apart along x."""
    return make_domain(Node(1, (0.0, 0.0), ndf=3), Node(2, (2.0, 0.0), ndf=3))


@pytest.fixture
def domain_3d_frame():
    """Two 3D nodes with 6 DOF each, skewed in space."""
    return make_domain(Node(1, (0.0, 0.0, 0.0), ndf=6), Node(2, (1.0, 2.0, 2.0), ndf=6))


@pytest.fixture
def scenario_spring(domain_2d):
    """Axial + shear spring, kb = diag(1000, 2000), bound to domain_2d."""
    spring = SpringElement(1, 2, 1, 2, directions=[0, 1], stiffness=[[1000.0, 0.0], [0.0, 2000.0]])
    spring.set_domain(domain_2d)
    return spring
