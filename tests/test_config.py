from ringmesh.config import N_DEVICES, Orientation, next_orientation


def test_center_wraps_to_north():
    assert next_orientation(Orientation.CENTER) is Orientation.NORTH


def test_ring_visits_every_device_once():
    seen = []
    current = Orientation.NORTH
    for _ in range(N_DEVICES):
        seen.append(current)
        current = next_orientation(current)
    assert current is Orientation.NORTH
    assert sorted(seen) == sorted(Orientation)


def test_next_is_successor_for_non_center():
    for orientation in Orientation:
        if orientation is not Orientation.CENTER:
            assert next_orientation(orientation) == orientation + 1