import pytest

from ringmesh.netselect import SCAN_LIST_SIZE, ApRecord, is_network_allowed, select_best_ap


@pytest.mark.parametrize(
    "uuid, prefix, name, expected",
    [
        ("abc", "MESH", "MESH_xyz", True),
        ("abc", "MESH", "MESH_abc", False),
        ("abc", "MESH", "OTHER_xyz", False),
        ("", "MESH", "MESH_xyz", False),
    ],
)
def test_is_network_allowed(uuid, prefix, name, expected):
    assert is_network_allowed(uuid, prefix, name) is expected


def test_strongest_allowed_ap_wins():
    records = [
        ApRecord("MESH_one", -70, 1),
        ApRecord("MESH_two", -40, 6),
        ApRecord("OTHER_net", -10, 11),
        ApRecord("MESH_self", -5, 3),
    ]
    best = select_best_ap(records, "self", "MESH")
    assert best == records[1]


def test_tie_keeps_first_record():
    records = [ApRecord("MESH_a", -50), ApRecord("MESH_b", -50)]
    assert select_best_ap(records, "me", "MESH") is records[0]


def test_no_allowed_ap_returns_none():
    records = [ApRecord("OTHER", -20), ApRecord("MESH_me", -30)]
    assert select_best_ap(records, "me", "MESH") is None


def test_minimum_rssi_is_never_selected():
    assert select_best_ap([ApRecord("MESH_a", -128)], "me", "MESH") is None


def test_records_past_scan_list_are_ignored():
    records = [ApRecord("OTHER", -90)] * SCAN_LIST_SIZE + [ApRecord("MESH_late", -10)]
    assert select_best_ap(records, "me", "MESH") is None
    assert select_best_ap(records[:SCAN_LIST_SIZE - 1] + records[-1:], "me", "MESH") == records[-1]