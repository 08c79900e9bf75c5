import pytest

from ringmesh.config import Orientation
from ringmesh.netutils import Network, find_free_spot, get_node_subnet, mask_size


@pytest.mark.parametrize("prefix", range(33))
def test_mask_size_of_prefix_masks(prefix):
    mask = (0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF
    assert mask_size(mask) == prefix


def test_mask_size_zero():
    assert mask_size(0) == 0


def test_documented_subnet_example():
    # 10.0.0.0/8 split for the center device gives 10.160.0.0/11.
    subnet = get_node_subnet(Network(0x0A000000, 0xFF000000), Orientation.CENTER)
    assert subnet == Network(0x0AA00000, 0xFFE00000)


def test_subnets_lie_inside_parent_and_are_distinct():
    parent = Network(0x0A000000, 0xFF000000)
    subnets = [get_node_subnet(parent, o) for o in Orientation]
    assert len(set(subnets)) == len(subnets)
    for subnet in subnets:
        assert subnet.addr & parent.mask == parent.addr
        assert mask_size(subnet.mask) == mask_size(parent.mask) + 3
        assert subnet.addr & subnet.mask == subnet.addr


def test_subnet_of_too_small_network_rejected():
    with pytest.raises(ValueError):
        get_node_subnet(Network(0x0A000000, 0xFFFFFFFC), Orientation.NORTH)


def test_find_free_spot_returns_first_empty():
    networks = [Network(0x0A000000, 0xFF000000), Network(), Network()]
    assert find_free_spot(networks) == 1


def test_find_free_spot_none_when_full():
    networks = [Network(0x0A000000, 0xFF000000)] * 3
    assert find_free_spot(networks) is None


def test_network_str_shows_hex_and_prefix():
    assert str(Network(0x0A000000, 0xFF000000)) == "0A000000/8"