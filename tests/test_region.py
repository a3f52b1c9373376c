import struct

import pytest

from harbol.region import Region, RegionError


def test_initial_remaining_equals_size():
    region = Region(8 * 10)
    assert region.remaining() == 80


def test_alloc_values_fill_region():
    region = Region(8 * 10)
    offsets = []
    for n in range(10):
        off = region.alloc(8)
        struct.pack_into("<q", region.view(off, 8), 0, n + 1)
        offsets.append(off)
        assert region.remaining() == 80 - 8 * (n + 1)
    values = [struct.unpack_from("<q", region.view(off, 8))[0] for off in offsets]
    assert values == list(range(1, 11))
    with pytest.raises(RegionError):
        region.alloc(8)


def test_differently_sized_values():
    region = Region(1000)
    assert region.offset == 1000
    f_off = region.alloc(4)
    struct.pack_into("<f", region.view(f_off, 4), 0, 32.0)
    assert region.offset == 992
    v_off = region.alloc(24)
    struct.pack_into("<3d", region.view(v_off, 24), 0, 3.0, 5.0, 10.0)
    assert region.remaining() == 968
    assert v_off % 8 == 0
    assert struct.unpack_from("<f", region.view(f_off, 4))[0] == 32.0
    assert struct.unpack_from("<3d", region.view(v_off, 24)) == (3.0, 5.0, 10.0)


def test_invalid_sizes_raise():
    region = Region(16)
    with pytest.raises(RegionError):
        region.alloc(0)
    with pytest.raises(RegionError):
        region.alloc(17)
    with pytest.raises(RegionError):
        Region(0)


def test_from_buffer_shares_memory_and_zeroes():
    buf = bytearray(b"\xff" * 16)
    region = Region.from_buffer(buf)
    off = region.alloc(8)
    assert bytes(region.view(off, 8)) == bytes(8)
    region.view(off, 4)[:] = b"abcd"
    assert buf[off:off + 4] == b"abcd"


def test_from_buffer_rejects_readonly_and_empty():
    with pytest.raises(TypeError):
        Region.from_buffer(b"abcdefgh")
    with pytest.raises(RegionError):
        Region.from_buffer(bytearray())


def test_clear_releases_region():
    region = Region(32)
    region.alloc(8)
    region.clear()
    assert region.size == 0
    assert region.remaining() == 0
    with pytest.raises(RegionError):
        region.alloc(8)


def test_view_out_of_bounds():
    region = Region(16)
    with pytest.raises(IndexError):
        region.view(12, 8)