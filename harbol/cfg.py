"""Configuration tree: typed values in ordered sections, dotted key paths and text output."""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

_FLOAT32 = struct.Struct("=f")


def _to_float32(value: float) -> float:
    return _FLOAT32.unpack(_FLOAT32.pack(float(value)))[0]


class CfgType(IntEnum):
    """The kind of value a configuration key holds."""

    INVALID = -1
    NULL = 0
    MAP = 1
    STRING = 2
    FLOAT = 3
    INT = 4
    BOOL = 5
    COLOR = 6
    VEC4D = 7


@dataclass
class Color:
    """Four byte colour; each channel is truncated to eight bits."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0

    def __post_init__(self) -> None:
        self.r = int(self.r) & 0xFF
        self.g = int(self.g) & 0xFF
        self.b = int(self.b) & 0xFF
        self.a = int(self.a) & 0xFF


@dataclass
class Vec4D:
    """Four component vector held at 32-bit float precision."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    def __post_init__(self) -> None:
        self.x = _to_float32(self.x)
        self.y = _to_float32(self.y)
        self.z = _to_float32(self.z)
        self.w = _to_float32(self.w)


@dataclass
class _Entry:
    kind: CfgType
    value: Any


_EXPECTED_TYPES: dict[CfgType, tuple[type, ...]] = {
    CfgType.STRING: (str,),
    CfgType.FLOAT: (float, int),
    CfgType.INT: (int,),
    CfgType.BOOL: (bool,),
    CfgType.COLOR: (Color,),
    CfgType.VEC4D: (Vec4D,),
}


def _coerce(kind: CfgType, value: Any) -> Any:
    if kind is CfgType.NULL:
        return None
    if kind is CfgType.MAP:
        if not isinstance(value, Config):
            raise TypeError("a map value must be a Config")
        return value
    expected = _EXPECTED_TYPES[kind]
    if not isinstance(value, expected) or (kind is not CfgType.BOOL and isinstance(value, bool)):
        raise TypeError(f"value {value!r} does not suit type {kind.name}")
    if kind is CfgType.FLOAT:
        return float(value)
    return value


def _target_name(keypath: str) -> str:
    """The last unescaped-dot component of a path, with backslashes removed."""
    if not keypath:
        return ""
    i = len(keypath) - 1
    while i > 0:
        if keypath[i] == ".":
            if keypath[i - 1] == "\\":
                i -= 1
            else:
                i += 1
                break
        else:
            i -= 1
    return keypath[i:].replace("\\", "")


def _path_sections(keypath: str) -> Iterator[str]:
    """Split a path on unescaped dots, turning ``\\.`` into a literal dot."""
    i = 0
    length = len(keypath)
    while True:
        section: list[str] = []
        while i < length:
            char = keypath[i]
            if char == "\\" and i + 1 < length and keypath[i + 1] == ".":
                section.append(".")
                i += 2
            elif char == ".":
                i += 1
                break
            else:
                section.append(char)
                i += 1
        if not section:
            return
        yield "".join(section)


class Config:
    """An ordered section of typed key-value pairs; sections nest as MAP values.

    Key paths separate section names with dots; a dot that belongs to a key
    is escaped with a backslash.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __repr__(self) -> str:
        return f"Config({ {k: e.value for k, e in self._entries.items()}!r})"

    def insert(self, key: str, kind: CfgType, value: Any = None) -> None:
        """Add a new key directly to this section."""
        kind = CfgType(kind)
        if kind is CfgType.INVALID:
            raise ValueError("cannot insert a value of invalid type")
        if key in self._entries:
            raise KeyError(f"duplicate key {key!r}")
        self._entries[key] = _Entry(kind, _coerce(kind, value))

    def _get_entry(self, keypath: str) -> _Entry | None:
        dot = keypath.find(".")
        if dot < 0 or (dot > 0 and keypath[dot - 1] == "\\"):
            entry = self._entries.get(keypath)
            if entry is None or entry.kind is CfgType.NULL:
                return None
            return entry

        target = _target_name(keypath)
        current: Config = self
        entry = None
        for section in _path_sections(keypath):
            entry = current._entries.get(section)
            if entry is None or section == target:
                break
            if entry.kind is CfgType.MAP:
                current = entry.value
        return entry

    def _get_value(self, keypath: str, kind: CfgType) -> Any:
        entry = self._get_entry(keypath)
        if entry is None or entry.kind is not kind:
            return None
        return entry.value

    def get_section(self, keypath: str) -> Config | None:
        return self._get_value(keypath, CfgType.MAP)

    def get_str(self, keypath: str) -> str | None:
        return self._get_value(keypath, CfgType.STRING)

    def get_float(self, keypath: str) -> float | None:
        return self._get_value(keypath, CfgType.FLOAT)

    def get_int(self, keypath: str) -> int | None:
        return self._get_value(keypath, CfgType.INT)

    def get_bool(self, keypath: str) -> bool | None:
        return self._get_value(keypath, CfgType.BOOL)

    def get_color(self, keypath: str) -> Color | None:
        return self._get_value(keypath, CfgType.COLOR)

    def get_vec4d(self, keypath: str) -> Vec4D | None:
        return self._get_value(keypath, CfgType.VEC4D)

    def get_type(self, keypath: str) -> CfgType:
        """Type of the value at ``keypath``, or INVALID when there is none."""
        entry = self._get_entry(keypath)
        return CfgType.INVALID if entry is None else entry.kind

    def _set(self, keypath: str, kind: CfgType, value: Any, override_convert: bool) -> None:
        entry = self._get_entry(keypath)
        if entry is None:
            raise KeyError(f"no value at {keypath!r}")
        value = _coerce(kind, value)
        if entry.kind is not kind and not override_convert:
            raise TypeError(f"{keypath!r} holds {entry.kind.name}, not {kind.name}")
        entry.kind = kind
        entry.value = value

    def set_str(self, keypath: str, value: str, override_convert: bool = False) -> None:
        self._set(keypath, CfgType.STRING, value, override_convert)

    def set_float(self, keypath: str, value: float, override_convert: bool = False) -> None:
        self._set(keypath, CfgType.FLOAT, value, override_convert)

    def set_int(self, keypath: str, value: int, override_convert: bool = False) -> None:
        self._set(keypath, CfgType.INT, value, override_convert)

    def set_bool(self, keypath: str, value: bool, override_convert: bool = False) -> None:
        self._set(keypath, CfgType.BOOL, value, override_convert)

    def set_color(self, keypath: str, value: Color, override_convert: bool = False) -> None:
        self._set(keypath, CfgType.COLOR, value, override_convert)

    def set_vec4d(self, keypath: str, value: Vec4D, override_convert: bool = False) -> None:
        self._set(keypath, CfgType.VEC4D, value, override_convert)

    def set_null(self, keypath: str) -> None:
        """Turn the value at ``keypath`` into null."""
        entry = self._get_entry(keypath)
        if entry is None:
            raise KeyError(f"no value at {keypath!r}")
        entry.kind = CfgType.NULL
        entry.value = None

    def _lines(self, tabs: int) -> Iterator[str]:
        indent = "\t" * tabs
        for key, entry in self._entries.items():
            head = f'{indent}"{key}": '
            value = entry.value
            kind = entry.kind
            if kind is CfgType.NULL:
                yield head + "null\n"
            elif kind is CfgType.MAP:
                yield head + "{\n"
                yield from value._lines(tabs + 1)
                yield indent + "}\n"
            elif kind is CfgType.STRING:
                yield f'{head}"{value}"\n'
            elif kind is CfgType.FLOAT:
                yield f"{head}{value:f}\n"
            elif kind is CfgType.INT:
                yield f"{head}{value:d}\n"
            elif kind is CfgType.BOOL:
                yield head + ("true\n" if value else "false\n")
            elif kind is CfgType.COLOR:
                yield f"{head}c[ {value.r}, {value.g}, {value.b}, {value.a} ]\n"
            elif kind is CfgType.VEC4D:
                yield f"{head}v[ {value.x:f}, {value.y:f}, {value.z:f}, {value.w:f} ]\n"

    def to_str(self) -> str:
        """Render the configuration as text, nested sections indented by tabs."""
        return "".join(self._lines(0))

    def build_file(self, filename, overwrite: bool = True) -> None:
        """Write the configuration text to a file, replacing or appending to it."""
        with open(filename, "w" if overwrite else "a", encoding="utf-8") as file:
            file.write(self.to_str())