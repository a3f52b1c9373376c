import struct

import pytest

from harbol.objpool import ObjPool, ObjPoolError


def _write(pool, off, value):
    struct.pack_into("<q", pool.view(off), 0, value)


def _read(pool, off):
    return struct.unpack_from("<q", pool.view(off))[0]


def test_source_scenario():
    pool = ObjPool(8, 5)
    assert pool.free_blocks == 5

    offsets = []
    for n in range(5):
        off = pool.alloc()
        _write(pool, off, n + 1)
        offsets.append(off)
        assert _read(pool, off) == n + 1
        assert pool.free_blocks == 4 - n

    for n, off in enumerate(offsets):
        pool.free(off)
        assert pool.free_blocks == n + 1

    offsets = []
    for n in range(5):
        off = pool.alloc()
        _write(pool, off, n + 1)
        offsets.append(off)
        assert _read(pool, off) == n + 1
        assert pool.free_blocks == 4 - n

    pool.clear()
    assert pool.next_free is None
    assert pool.free_blocks == 0
    with pytest.raises(ObjPoolError):
        pool.alloc()


def test_allocations_are_distinct_blocks():
    pool = ObjPool(8, 5)
    offsets = [pool.alloc() for _ in range(5)]
    assert len(set(offsets)) == 5
    assert all(off % pool.objsize == 0 for off in offsets)
    assert all(0 <= off < pool.size * pool.objsize for off in offsets)
    assert pool.next_free is None


def test_exhausted_pool_raises():
    pool = ObjPool(8, 2)
    pool.alloc()
    pool.alloc()
    with pytest.raises(ObjPoolError):
        pool.alloc()


def test_freed_block_is_reused_first():
    pool = ObjPool(8, 4)
    a = pool.alloc()
    pool.alloc()
    pool.free(a)
    assert pool.alloc() == a


def test_alloc_zeroes_block():
    pool = ObjPool(8, 2)
    off = pool.alloc()
    _write(pool, off, -1)
    pool.free(off)
    again = pool.alloc()
    assert again == off
    assert bytes(pool.view(again)) == bytes(pool.objsize)


def test_object_size_is_aligned():
    pool = ObjPool(3, 2)
    assert pool.objsize == 8
    assert len(pool.view(pool.alloc())) == 8


def test_invalid_construction():
    with pytest.raises(ObjPoolError):
        ObjPool(0, 5)
    with pytest.raises(ObjPoolError):
        ObjPool(8, 0)


def test_free_rejects_foreign_offsets():
    pool = ObjPool(8, 3)
    with pytest.raises(ObjPoolError):
        pool.free(-8)
    with pytest.raises(ObjPoolError):
        pool.free(24)
    with pytest.raises(ObjPoolError):
        pool.free(3)


def test_from_buffer_checks():
    with pytest.raises(ObjPoolError):
        ObjPool.from_buffer(bytearray(64), 4, 4)
    with pytest.raises(ObjPoolError):
        ObjPool.from_buffer(bytearray(64), 12, 4)
    with pytest.raises(ObjPoolError):
        ObjPool.from_buffer(bytearray(16), 8, 4)
    with pytest.raises(TypeError):
        ObjPool.from_buffer(bytes(64), 8, 4)


def test_from_buffer_shares_memory():
    buf = bytearray(32)
    pool = ObjPool.from_buffer(buf, 8, 4)
    assert pool.free_blocks == 4
    off = pool.alloc()
    _write(pool, off, 77)
    assert struct.unpack_from("<q", buf, off)[0] == 77