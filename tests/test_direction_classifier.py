import pytest

from springlink import ConfigurationError, DOFLayout, classify
from springlink.kernel.dof import DOFManager, check_directions, layout_for_nodes


@pytest.mark.parametrize("ndm, num_dof, expected", [
    (1, 2, DOFLayout.D1N2),
    (2, 4, DOFLayout.D2N4),
    (2, 6, DOFLayout.D2N6),
    (3, 6, DOFLayout.D3N6),
    (3, 12, DOFLayout.D3N12),
])
def test_supported_layouts(ndm, num_dof, expected):
    layout = classify(ndm, num_dof)
    assert layout is expected
    assert layout.ndm == ndm
    assert layout.num_dof == num_dof
    assert layout.dof_per_node == num_dof // 2


@pytest.mark.parametrize("ndm, num_dof", [
    (1, 4), (1, 6), (2, 2), (2, 12), (3, 2), (3, 4), (0, 2), (4, 12),
])
def test_unsupported_layouts_raise(ndm, num_dof):
    with pytest.raises(ConfigurationError):
        classify(ndm, num_dof)


def test_layout_from_nodal_dofs():
    assert layout_for_nodes(2, 3) is DOFLayout.D2N6
    assert layout_for_nodes(3, 6) is DOFLayout.D3N12


def test_rotation_dofs():
    """Planar frames rotate about z only; 3D frames about all three axes."""
    assert DOFLayout.D2N6.rotation_dof(2) == 2
    assert DOFLayout.D2N6.rotation_dof(1) is None
    assert DOFLayout.D3N12.rotation_dof(1) == 4
    assert DOFLayout.D3N12.rotation_dof(2) == 5
    assert DOFLayout.D3N6.rotation_dof(2) is None
    assert DOFLayout.D2N4.num_rotations == 0


def test_direction_codes_in_range():
    assert check_directions(DOFLayout.D3N12, [0, 5, 3]) == [0, 5, 3]
    assert check_directions(DOFLayout.D1N2, [0]) == [0]


@pytest.mark.parametrize("layout, directions", [
    (DOFLayout.D1N2, [1]),
    (DOFLayout.D2N4, [0, 2]),
    (DOFLayout.D2N6, [3]),
    (DOFLayout.D3N6, [-1]),
    (DOFLayout.D3N12, [6]),
    (DOFLayout.D2N4, [0, 0]),
    (DOFLayout.D3N12, []),
])
def test_bad_direction_codes_raise(layout, directions):
    with pytest.raises(ConfigurationError):
        check_directions(layout, directions)


def test_dof_manager_indices():
    dof = DOFManager(dof_per_node=3)
    assert dof.idx(1, 0) == 3
    assert dof.idx(0, 2) == 2
    assert dof.node_dofs(0) == [0, 1, 2]
    assert dof.node_dofs(1) == [3, 4, 5]
