"""
Geometry pass: length, orientation triad, global->local and local->basic.
"""
import numpy as np
import pytest

from springlink import ConfigurationError, Domain, GeometryError, Node, SpringElement
from springlink.kernel.dof import DOFLayout
from springlink.kernel.transform import build_transformations, local_to_basic, orientation_matrix


def test_horizontal_2d_is_identity(scenario_spring):
    g = scenario_spring.geometry
    assert np.isclose(g.length, 3.0)
    np.testing.assert_allclose(g.trans, np.eye(3), atol=1e-15)
    np.testing.assert_allclose(g.Tgl, np.eye(4), atol=1e-15)


def test_vertical_2d_rotates_axes():
    """A vertical member: local x is global Y, local y points to -X."""
    g = build_transformations(DOFLayout.D2N4, [0, 1], (0.0, 0.0), (0.0, 2.0))
    expected = np.array([
        [0.0, 1.0, 0.0],
        [-1.0, 0.0, 0.0],
        [0.0, 0.0, 1.0],
    ])
    np.testing.assert_allclose(g.trans, expected, atol=1e-15)

    # Pulling node j up along the member is pure axial deformation
    ug = np.array([0.0, 0.0, 0.0, 0.01])
    ub = g.Tlb @ g.Tgl @ ug
    np.testing.assert_allclose(ub, [0.01, 0.0], atol=1e-15)


def test_3d_default_y_and_vertical_member():
    layout = DOFLayout.D3N6
    trans = orientation_matrix(layout, np.array([0.0, 0.0, 4.0]), 4.0)
    np.testing.assert_allclose(trans[0], [0, 0, 1], atol=1e-15)
    np.testing.assert_allclose(trans[1], [0, 1, 0], atol=1e-15)
    np.testing.assert_allclose(trans[2], [-1, 0, 0], atol=1e-15)


def test_3d_member_along_global_y_uses_fallback():
    trans = orientation_matrix(DOFLayout.D3N6, np.array([0.0, 5.0, 0.0]), 5.0)
    np.testing.assert_allclose(trans[0], [0, 1, 0], atol=1e-15)
    np.testing.assert_allclose(trans[2], [0, 0, 1], atol=1e-15)


def test_explicit_x_overrides_nodes():
    g = build_transformations(DOFLayout.D2N4, [0], (0.0, 0.0), (3.0, 0.0), x=(0.0, 2.0, 0.0))
    np.testing.assert_allclose(g.trans[0], [0, 1, 0], atol=1e-15)


def test_y_is_orthogonalized():
    trans = orientation_matrix(
        DOFLayout.D3N6, np.array([1.0, 0.0, 0.0]), 1.0, y=(1.0, 1.0, 0.0)
    )
    np.testing.assert_allclose(trans[1], [0, 1, 0], atol=1e-15)
    np.testing.assert_allclose(trans @ trans.T, np.eye(3), atol=1e-14)


def test_collinear_x_and_y_raise():
    with pytest.raises(GeometryError):
        orientation_matrix(DOFLayout.D3N6, np.array([1.0, 0.0, 0.0]), 1.0, y=(2.0, 0.0, 0.0))


def test_zero_x_raises():
    with pytest.raises(GeometryError):
        orientation_matrix(DOFLayout.D3N6, np.array([1.0, 0.0, 0.0]), 1.0, x=(0.0, 0.0, 0.0))


def test_coincident_nodes_need_explicit_x():
    domain = Domain()
    domain.add_node(Node(1, (1.0, 1.0), ndf=2))
    domain.add_node(Node(2, (1.0, 1.0), ndf=2))

    spring = SpringElement(1, 2, 1, 2, [0, 1], np.eye(2))
    with pytest.raises(GeometryError):
        spring.set_domain(domain)
    assert not spring.is_bound

    oriented = SpringElement(2, 2, 1, 2, [0, 1], np.eye(2), x=(1.0, 0.0, 0.0))
    oriented.set_domain(domain)
    assert oriented.length == 0.0


def test_1d_uses_global_axis():
    """In 1D the local axis is always global X, even if node j is to the left."""
    domain = Domain()
    domain.add_node(Node(1, (5.0,), ndf=1))
    domain.add_node(Node(2, (2.0,), ndf=1))
    spring = SpringElement(1, 1, 1, 2, [0], [[50.0]])
    spring.set_domain(domain)
    assert spring.layout is DOFLayout.D1N2
    np.testing.assert_allclose(spring.geometry.Tgl, np.eye(2))
    np.testing.assert_allclose(spring.geometry.Tlb, [[-1.0, 1.0]])


def test_global_to_local_is_orthogonal(domain_3d_frame):
    spring = SpringElement(1, 3, 1, 2, [0, 1, 2, 3, 4, 5], np.eye(6))
    spring.set_domain(domain_3d_frame)
    Tgl = spring.geometry.Tgl
    assert Tgl.shape == (12, 12)
    np.testing.assert_allclose(Tgl @ Tgl.T, np.eye(12), atol=1e-14)
    np.testing.assert_allclose(Tgl[:3, :3], Tgl[3:6, 3:6])
    np.testing.assert_allclose(Tgl[:6, :6], Tgl[6:, 6:])


def test_local_to_basic_2d_frame_shear_coupling():
    """Shear in a planar frame spring is measured at mid-length."""
    Tlb = local_to_basic(DOFLayout.D2N6, [0, 1, 2], L=2.0)
    expected = np.array([
        [-1.0, 0.0, 0.0, 1.0, 0.0, 0.0],
        [0.0, -1.0, -1.0, 0.0, 1.0, -1.0],
        [0.0, 0.0, -1.0, 0.0, 0.0, 1.0],
    ])
    np.testing.assert_array_equal(Tlb, expected)


def test_local_to_basic_3d_frame_shear_coupling():
    Tlb = local_to_basic(DOFLayout.D3N12, [1, 2], L=3.0)
    row1 = np.zeros(12)
    row1[[1, 7]] = [-1.0, 1.0]
    row1[[5, 11]] = -1.5
    row2 = np.zeros(12)
    row2[[2, 8]] = [-1.0, 1.0]
    row2[[4, 10]] = 1.5
    np.testing.assert_array_equal(Tlb, np.vstack([row1, row2]))


def test_node_dimension_mismatch_raises():
    domain = Domain()
    domain.add_node(Node(1, (0.0, 0.0, 0.0), ndf=3))
    domain.add_node(Node(2, (1.0, 0.0, 0.0), ndf=3))
    spring = SpringElement(1, 2, 1, 2, [0], [[1.0]])
    with pytest.raises(GeometryError):
        spring.set_domain(domain)


def test_nodes_with_different_dofs_raise():
    domain = Domain()
    domain.add_node(Node(1, (0.0, 0.0), ndf=2))
    domain.add_node(Node(2, (1.0, 0.0), ndf=3))
    spring = SpringElement(1, 2, 1, 2, [0], [[1.0]])
    with pytest.raises(ConfigurationError):
        spring.set_domain(domain)


def test_missing_node_raises(domain_2d):
    spring = SpringElement(1, 2, 1, 99, [0], [[1.0]])
    with pytest.raises(ConfigurationError):
        spring.set_domain(domain_2d)
    assert not spring.is_bound


def test_direction_outside_bound_layout_raises(domain_2d):
    """Direction 2 (rz) is valid in 2D only when nodes carry a rotation."""
    spring = SpringElement(1, 2, 1, 2, [0, 2], np.eye(2))
    with pytest.raises(ConfigurationError):
        spring.set_domain(domain_2d)
