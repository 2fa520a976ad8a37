"""
Checkpoint record: pack / unpack must rebuild an identical element.
"""
import json

import numpy as np
import pytest

from springlink import DecodeError, Domain, Node, SpringElement, pack, unpack


def _domain_3d():
    domain = Domain()
    domain.add_node(Node(10, (0.0, 0.0, 0.0), ndf=6))
    domain.add_node(Node(20, (0.3, -1.7, 2.9), ndf=6))
    return domain


def _full_spring():
    rng = np.random.default_rng(3)
    a = rng.normal(size=(6, 6))
    kb = a @ a.T + np.eye(6) / 3.0
    cb = np.diag([0.1, 0.2, 0.3, 0.4, 0.5, 0.6]) / 7.0
    spring = SpringElement(
        5, 3, 10, 20, [0, 1, 2, 3, 4, 5], kb,
        y=(0.1, 0.9, 0.2), x=(0.3, -1.7, 2.9),
        moment_ratios=[0.5, 0.5, 0.6, 0.4],
        add_rayleigh=True, damping=cb, dof_per_node=6,
    )
    spring.set_rayleigh_damping_factors(0.0, 1e-3, 2e-3, 0.0)
    return spring


def test_round_trip_is_exact():
    original = _full_spring()
    copy = unpack(pack(original, commit_tag=4), commit_tag=4)

    assert copy.tag == original.tag
    assert copy.ndm == original.ndm
    assert copy.node_ids == original.node_ids
    assert copy.directions == original.directions
    np.testing.assert_array_equal(copy.kb, original.kb)
    np.testing.assert_array_equal(copy.cb, original.cb)
    assert copy.x == original.x
    assert copy.y == original.y
    np.testing.assert_array_equal(copy.mratio, original.mratio)
    assert copy.add_rayleigh is True
    assert (copy.beta_k, copy.beta_k0) == (1e-3, 2e-3)


def test_rebound_geometry_is_bit_identical():
    domain = _domain_3d()
    original = _full_spring()
    original.set_domain(domain)
    copy = SpringElement.recv_self(original.send_self(commit_tag=1), commit_tag=1)
    copy.set_domain(domain)

    np.testing.assert_array_equal(copy.geometry.trans, original.geometry.trans)
    np.testing.assert_array_equal(copy.geometry.Tgl, original.geometry.Tgl)
    np.testing.assert_array_equal(copy.geometry.Tlb, original.geometry.Tlb)
    np.testing.assert_array_equal(copy.get_initial_stiff(), original.get_initial_stiff())


def test_optional_values_stay_absent():
    spring = SpringElement(1, 2, 1, 2, [0, 1], [[1000.0, 0.0], [0.0, 2000.0]])
    copy = unpack(pack(spring))
    assert copy.cb is None
    assert copy.mratio is None
    assert copy.x is None and copy.y is None
    assert copy.dof_per_node is None


def test_trial_state_is_not_carried():
    domain = _domain_3d()
    original = _full_spring()
    original.set_domain(domain)
    domain.set_trial_response(20, np.full(6, 0.01))
    original.update()
    original.commit_state()

    copy = unpack(pack(original))
    copy.set_domain(domain)
    np.testing.assert_array_equal(copy.get_resisting_force(), np.zeros(12))


def test_stale_commit_tag_is_rejected():
    data = pack(_full_spring(), commit_tag=7)
    with pytest.raises(DecodeError):
        unpack(data, commit_tag=8)


def _edit(data, **changes):
    record = json.loads(data)
    for key, value in changes.items():
        if value is KeyError:
            del record[key]
        else:
            record[key] = value
    return json.dumps(record).encode()


@pytest.mark.parametrize("changes", [
    {"version": 99},
    {"directions": KeyError},
    {"unexpected": 1},
    {"stiffness": [[1.0, 0.0], [0.0, 1.0]]},
    {"ndm": 4},
    {"class_type": "ZeroLength"},
    {"moment_ratios": [2.0, 0.0, 0.0, 0.0]},
])
def test_bad_records_raise(changes):
    data = _edit(pack(_full_spring()), **changes)
    with pytest.raises(DecodeError):
        unpack(data)


def test_garbage_raises():
    with pytest.raises(DecodeError):
        unpack(b"\x00\x01 not a record")
    with pytest.raises(DecodeError):
        unpack(12345)
