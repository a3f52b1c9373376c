# harbol

A small toolkit of allocators that work over plain byte storage, a bounded
array, a growable byte buffer and a nested key-value configuration format.
Pure Python, no dependencies.

## Modules

| Module | What it provides |
| --- | --- |
| `harbol.region` | `Region`, a bump allocator that hands out word-aligned, zeroed blocks from the top of a buffer downwards. `RegionError` on failure. |
| `harbol.bistack` | `BiStack`, a double-ended stack allocator: `alloc_front` grows up from the start, `alloc_back` grows down from the end. `BiStackError` on failure. |
| `harbol.objpool` | `ObjPool`, a pool of equally sized blocks whose free list is stored inside the free blocks. `ObjPoolError` on failure. |
| `harbol.mempool` | `MemPool`, a variable-size allocator with size buckets, a large free list, coalescing of neighbouring free blocks and a region stack underneath. `MemPoolError` on failure. |
| `harbol.array` | `Array`, a sequence with an explicit capacity (`grow`, `resize`, `shrink`), plus the helper `shift_up`. `ArrayFullError` when an item does not fit. |
| `harbol.bytebuffer` | `ByteBuffer`, a byte buffer that grows to fit integers, floats, NUL-terminated strings, raw bytes and file contents. |
| `harbol.cfg` | `Config`, `CfgType`, `Color` and `Vec4D`: the configuration tree with dotted key paths and text output. |
| `harbol.cfgparse` | `parse_str`, `parse_file` and `CfgSyntaxError`: the parser for the configuration text format. |

## Installing

```
pip install .
```

## Allocators

The allocators do not hand out Python objects; they hand out integer offsets
into their own byte storage. `view(...)` returns a writable `memoryview` of an
allocated block. Each allocator can own its memory (`Region(size)`,
`BiStack(size)`, `ObjPool(objsize, length)`, `MemPool(size)`) or work over a
writable buffer you supply (`from_buffer(...)`). Sizes are rounded up to
multiples of 8 bytes. `clear()` releases the memory, after which allocation
raises.

```python
from harbol.region import Region

region = Region(80)
offset = region.alloc(8)
region.view(offset, 8)[:] = (42).to_bytes(8, "little")
print(region.remaining())  # 72
```

```python
from harbol.bistack import BiStack

stack = BiStack(64)
front = stack.alloc_front(8)   # 0
back = stack.alloc_back(8)     # 56
print(stack.margins())         # 40
stack.reset_all()
```

```python
from harbol.objpool import ObjPool

pool = ObjPool(8, 5)
slot = pool.alloc()
pool.view(slot)[:8] = (1).to_bytes(8, "little")
pool.free(slot)
print(pool.free_blocks)  # 5
```

`MemPool` puts a 24-byte header in front of every block; the pointer it returns
is the offset of the data after the header. `block_size(ptr)` gives the block's
total size, `free_nodes()` lists the free nodes as `(offset, size)` pairs and
`remaining()` counts the unused region plus every free node. `realloc(None, n)`
behaves like `alloc(n)`. Freeing a pointer that is not an allocated block raises
`MemPoolError`.

```python
from harbol.mempool import MemPool

pool = MemPool(1000)
ptr = pool.alloc(4)
ptr = pool.realloc(ptr, 40)
pool.free(ptr)
print(pool.remaining())  # 1000
```

## Array

`Array` never grows on its own: `append` and `insert` raise `ArrayFullError`
once the capacity is reached. The default and minimum starting capacity is 4.
`grow()` doubles to the next power of two, `resize(n)` sets the capacity to the
power of two above `n`, and `shrink(exact_fit)` reduces it towards the length.
Deletion is by index (`del_by_index`), range (`del_by_range`) or value
(`del_by_val`); `index_of` raises `ValueError` when the value is missing.

```python
from harbol.array import Array

arr = Array(8)
for value in (100, 101, 102):
    arr.insert(value)
arr.reverse()
print(list(arr))  # [102, 101, 100]
```

## ByteBuffer

Values are written in the machine's native byte order; integers are masked to
their width. `insert_cstr` UTF-8 encodes a string and adds a NUL terminator.
`delete(index, count)` removes bytes and closes the gap. `to_file`,
`insert_from_file` and `insert_from_filename` work with binary files.

```python
from harbol.bytebuffer import ByteBuffer

buf = ByteBuffer()
buf.insert_int16(50)
buf.insert_cstr("hello")
print(len(buf), bytes(buf))
```

## Config format

```
'root': {
    'name': 'John',
    'alive': true,
    'age': 0x18,
    'money': 35.42e4,
    'colors': c[ 0xff, 0xff, 0xff, 0xaa ],
    'origin': v[ 10.0, 24.43, 25.0, 1.0 ],
    'dotted.key': { 'inner': null }
}
```

- Keys are single- or double-quoted strings; `:` and `,` between tokens are
  optional, and `#`, `//` and `/* */` comments are skipped.
- Values are strings, integers (decimal, hex, octal, binary), floats (including
  hex floats), `true`, `false`, `null`, colors `c[...]`, vectors `v[...]` and
  nested sections `{...}`.
- `iota` counts up within a section, `IOTA` counts up across the whole file.
  A key `<enum>` is replaced by a per-section counter, `<ENUM>` by a global one.
- `<FILE>` (or `<file>`) as a value is the name of the parsed file, or
  `"C-string-cfg"` when parsing a string.
- A key `<include>` (or `<INCLUDE>`) followed by a quoted path parses that file
  and stores it as a section under the path; if the file cannot be opened a
  warning is issued and nothing is added.

Malformed text raises `CfgSyntaxError`, which carries `message`, `line` and
`filename`.

```python
from harbol.cfgparse import parse_str

cfg = parse_str("'root': { 'age': 0x18, 'dotted.key': { 'x': 'y' } }")
print(cfg.get_int("root.age"))             # 24
print(cfg.get_str("root.dotted\\.key.x"))  # y
cfg.set_str("root.age", "old", True)
print(cfg.to_str())
```

Key paths are separated by dots; a literal dot in a key is written as `\.`.
The `get_*` methods return `None` when the key is missing or holds another
type, and `get_type` returns `CfgType.INVALID` then. The `set_*` methods raise
`KeyError` for a missing key and `TypeError` for a type mismatch unless
`override_convert` is true. `set_null` turns a value into null. New keys are
added to a section with `Config.insert(key, kind, value)`. `build_file` writes
`to_str()` to a file, replacing or appending.

## What it does not do

This is a library only: there is no command-line tool. The allocators manage
offsets inside Python byte buffers; they do not manage process memory or give
out real pointers.

## Running the tests

```
pip install .[test]
pytest
```