"""Parser for the configuration text format into :class:`harbol.cfg.Config` trees.

Grammar::

    keyval  = <string> [':'] (<value> | <section>) [','] ;
    section = '{' *<keyval> '}' ;
    value   = <string> | <number> | <vec> | "true" | "false" | "null"
            | "iota" | "IOTA" | "<FILE>" ;
    matrix  = '[' <number> [','] [<number>] [','] [<number>] [','] [<number>] ']' ;
    vec     = ('v' | 'c') <matrix> ;
    string  = '"' chars '"' | "'" chars "'" ;

Whitespace, ``#`` and ``//`` line comments, ``/* */`` block comments and the
delimiters ``:`` and ``,`` are skipped between tokens.
"""

from __future__ import annotations

import os
import warnings
from typing import Any

from harbol.cfg import CfgType, Color, Config, Vec4D

_WHITESPACE = " \t\n\r\v\f"
_QUOTES = "\"'"
_DIGITS = "0123456789"
_HEX_DIGITS = "0123456789abcdefABCDEF"
_OCT_DIGITS = "01234567"
_BIN_DIGITS = "01"
_NUMBER_SUFFIXES = "fFlLuU"
_INT_MIN = -(1 << 63)
_INT_MAX = (1 << 63) - 1
_STRING_CFG_NAME = "C-string-cfg"
_KEYWORD_ERROR = "invalid keyword value, only 'true', 'false', 'null', 'iota', and 'IOTA' are allowed"

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "?": "?",
}
_ESCAPE_WIDTHS = {"x": (1, 2), "u": (4, 4), "U": (8, 8)}


class CfgSyntaxError(ValueError):
    """Raised when configuration text does not follow the grammar."""

    def __init__(self, message: str, line: int | None = None, filename: str | None = None) -> None:
        self.message = message
        self.line = line
        self.filename = filename
        where = filename or "<string>"
        if line is not None:
            where = f"{where}:{line}"
        super().__init__(f"{where}: {message}")


def _scan(text: str, i: int, allowed: str) -> int:
    while i < len(text) and text[i] in allowed:
        i += 1
    return i


class _Parser:
    def __init__(self, text: str, filename: str | None) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.filename = filename
        self.global_iota = 0
        self.global_enum = 0
        self.local_iota = 0
        self.local_enum = 0

    def _peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.text[i] if i < len(self.text) else ""

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _advance(self, count: int) -> None:
        self.line += self.text.count("\n", self.pos, self.pos + count)
        self.pos += count

    def _error(self, message: str) -> CfgSyntaxError:
        return CfgSyntaxError(message, self.line, self.filename)

    def _skip(self) -> bool:
        """Skip whitespace, comments and delimiters; False when input is exhausted."""
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            following = self._peek(1)
            if char in _WHITESPACE:
                self._advance(1)
            elif char == "#" or (char == "/" and following == "/"):
                end = text.find("\n", self.pos)
                self._advance((len(text) if end < 0 else end) - self.pos)
            elif char == "/" and following == "*":
                end = text.find("*/", self.pos + 2)
                self._advance((len(text) if end < 0 else end + 2) - self.pos)
            elif char in ":,":
                self._advance(1)
            else:
                return True
        return False

    def _lex_string(self) -> str:
        text = self.text
        quote = text[self.pos]
        i = self.pos + 1
        out: list[str] = []
        while True:
            if i >= len(text):
                raise self._error("unterminated string literal")
            char = text[i]
            if char == quote:
                i += 1
                break
            if char != "\\":
                out.append(char)
                i += 1
                continue
            i += 1
            if i >= len(text):
                raise self._error("unterminated string literal")
            escape = text[i]
            if escape in _SIMPLE_ESCAPES:
                out.append(_SIMPLE_ESCAPES[escape])
                i += 1
            elif escape in _ESCAPE_WIDTHS:
                least, most = _ESCAPE_WIDTHS[escape]
                start = i + 1
                end = start
                while end < len(text) and end - start < most and text[end] in _HEX_DIGITS:
                    end += 1
                if end - start < least:
                    raise self._error(f"invalid '\\{escape}' escape in string literal")
                code = int(text[start:end], 16)
                if code > 0x10FFFF:
                    raise self._error(f"escape value {code:#x} out of range in string literal")
                out.append(chr(code))
                i = end
            elif escape in _OCT_DIGITS:
                end = i
                while end < len(text) and end - i < 3 and text[end] in _OCT_DIGITS:
                    end += 1
                out.append(chr(int(text[i:end], 8)))
                i = end
            else:
                raise self._error(f"invalid escape '\\{escape}' in string literal")
        self._advance(i - self.pos)
        return "".join(out)

    def _lex_number(self) -> tuple[Any, bool]:
        text = self.text
        start = self.pos
        i = start
        if i < len(text) and text[i] in "+-":
            i += 1
        if i >= len(text) or not (text[i] in _DIGITS or text[i] == "."):
            found = text[i] if i < len(text) else "end of input"
            raise self._error(f"invalid initial numeric digit: {found!r}")
        body = i
        is_float = False
        radix = 10
        if text.startswith(("0x", "0X"), i):
            radix = 16
            i += 2
            digits_start = i
            i = _scan(text, i, _HEX_DIGITS)
            digit_count = i - digits_start
            if i < len(text) and text[i] == ".":
                is_float = True
                frac_start = i + 1
                i = _scan(text, frac_start, _HEX_DIGITS)
                digit_count += i - frac_start
            if digit_count == 0:
                raise self._error(f"invalid number {text[start:i]!r}, missing hexadecimal digits")
            if i < len(text) and text[i] in "pP":
                is_float = True
                i += 1
                if i < len(text) and text[i] in "+-":
                    i += 1
                exp_start = i
                i = _scan(text, i, _DIGITS)
                if i == exp_start:
                    raise self._error(f"invalid number {text[start:i]!r}, missing exponent digits")
            elif is_float:
                raise self._error(f"invalid number {text[start:i]!r}, hexadecimal float needs an exponent")
        elif text.startswith(("0b", "0B"), i):
            radix = 2
            i += 2
            digits_start = i
            i = _scan(text, i, _BIN_DIGITS)
            if i == digits_start:
                raise self._error(f"invalid number {text[start:i]!r}, missing binary digits")
        else:
            digits_start = i
            i = _scan(text, i, _DIGITS)
            digit_count = i - digits_start
            if i < len(text) and text[i] == ".":
                is_float = True
                frac_start = i + 1
                i = _scan(text, frac_start, _DIGITS)
                digit_count += i - frac_start
            if digit_count == 0:
                raise self._error(f"invalid number {text[start:i]!r}, missing digits")
            if i < len(text) and text[i] in "eE":
                is_float = True
                i += 1
                if i < len(text) and text[i] in "+-":
                    i += 1
                exp_start = i
                i = _scan(text, i, _DIGITS)
                if i == exp_start:
                    raise self._error(f"invalid number {text[start:i]!r}, missing exponent digits")
        literal = text[start:i]
        i = _scan(text, i, _NUMBER_SUFFIXES)
        if i < len(text) and (text[i].isalnum() or text[i] in "_."):
            raise self._error(f"invalid number {text[start:i + 1]!r}")

        if is_float:
            value: Any = float.fromhex(literal) if radix == 16 else float(literal)
        else:
            negative = literal.startswith("-")
            digits = literal[body - start:]
            if radix == 16 or radix == 2:
                magnitude = int(digits[2:], radix)
            elif len(digits) > 1 and digits.startswith("0"):
                if digits.strip(_OCT_DIGITS):
                    raise self._error(f"invalid octal number {literal!r}")
                magnitude = int(digits, 8)
            else:
                magnitude = int(digits, 10)
            value = max(_INT_MIN, min(_INT_MAX, -magnitude if negative else magnitude))
        self._advance(i - start)
        return value, is_float

    def _expect_keyword(self, word: str) -> None:
        if not self.text.startswith(word, self.pos):
            raise self._error(_KEYWORD_ERROR)
        self._advance(len(word))

    def _insert(self, cfg: Config, key: str, kind: CfgType, value: Any) -> None:
        try:
            cfg.insert(key, kind, value)
        except KeyError:
            raise self._error(f"duplicate string key {key!r}") from None

    def _include(self, cfg: Config) -> None:
        if self._peek() not in _QUOTES or self._at_end():
            raise self._error("file for config inclusion is missing string quotes")
        path = self._lex_string()
        try:
            included = parse_file(path)
        except OSError:
            warnings.warn(
                f"{self.filename or '<string>'}:{self.line}: failed to include cfg file {path!r}",
                stacklevel=4,
            )
            return
        self._insert(cfg, path, CfgType.MAP, included)

    def _parse_matrix(self, key: str) -> tuple[CfgType, Any]:
        valtype = self._peek()
        self._advance(1)
        self._skip()
        if self._peek() != "[":
            found = self._peek() or "end of input"
            raise self._error(f"missing '[', got {found!r} instead")
        self._advance(1)
        self._skip()
        values: list[Any] = []
        while not self._at_end() and self._peek() != "]":
            value, _ = self._lex_number()
            values.append(value)
            self._skip()
        if self._at_end():
            raise self._error("unexpected end of file with ending ']' missing")
        self._advance(1)
        components = (values + [0, 0, 0, 0])[:4]
        if valtype == "c":
            return CfgType.COLOR, Color(*(int(c) for c in components))
        return CfgType.VEC4D, Vec4D(*components)

    def _parse_value(self, key: str) -> tuple[CfgType, Any]:
        char = self._peek()
        if char == "{":
            saved = (self.local_iota, self.local_enum)
            self.local_iota = self.local_enum = 0
            section = Config()
            self._parse_section(section)
            self.local_iota, self.local_enum = saved
            return CfgType.MAP, section
        if char in _QUOTES:
            return CfgType.STRING, self._lex_string()
        if char in ("c", "v"):
            return self._parse_matrix(key)
        if char == "t":
            self._expect_keyword("true")
            return CfgType.BOOL, True
        if char == "f":
            self._expect_keyword("false")
            return CfgType.BOOL, False
        if char == "n":
            self._expect_keyword("null")
            return CfgType.NULL, None
        if char == "I":
            self._expect_keyword("IOTA")
            value = self.global_iota
            self.global_iota += 1
            return CfgType.INT, value
        if char == "i":
            self._expect_keyword("iota")
            value = self.local_iota
            self.local_iota += 1
            return CfgType.INT, value
        if char in _DIGITS or char in ".-+":
            value, is_float = self._lex_number()
            return (CfgType.FLOAT if is_float else CfgType.INT), value
        if char == "[":
            raise self._error("array bracket missing 'c' or 'v' tag")
        if char == "<":
            for word in ("<file>", "<FILE>"):
                if self.text.startswith(word, self.pos):
                    self._advance(len(word))
                    return CfgType.STRING, self.filename or _STRING_CFG_NAME
            raise self._error(f"unknown control/command {self._peek(1)!r}")
        if not char:
            raise self._error(f"unexpected end of input after key {key!r}")
        raise self._error(f"unknown character detected {char!r}")

    def _parse_key_val(self, cfg: Config) -> bool:
        if not self._skip():
            return False
        if self._peek() not in _QUOTES:
            raise self._error(f"missing beginning quote for key {self._peek()!r}")
        key = self._lex_string()
        if not key:
            raise self._error("empty string key")
        if key in cfg:
            raise self._error(f"duplicate string key {key!r}")
        self._skip()

        if key == "<enum>":
            key = str(self.local_enum)
            self.local_enum += 1
        elif key == "<ENUM>":
            key = str(self.global_enum)
            self.global_enum += 1
        elif key in ("<INCLUDE>", "<include>"):
            self._include(cfg)
            return True

        kind, value = self._parse_value(key)
        self._insert(cfg, key, kind, value)
        self._skip()
        return True

    def _parse_section(self, cfg: Config) -> None:
        if self._peek() != "{":
            raise self._error(f"missing '{{' but got {self._peek()!r} for section")
        self._advance(1)
        self._skip()
        while not self._at_end() and self._peek() != "}":
            if not self._parse_key_val(cfg):
                break
        if self._at_end():
            raise self._error("unexpected end of file with missing '}' for section")
        self._advance(1)

    def parse(self) -> Config:
        cfg = Config()
        while self._parse_key_val(cfg):
            pass
        return cfg


def parse_str(text: str) -> Config:
    """Parse configuration text; ``<FILE>`` values become ``"C-string-cfg"``."""
    return _Parser(text, None).parse()


def parse_file(filename) -> Config:
    """Read and parse a configuration file; ``<FILE>`` values become its name."""
    name = os.fspath(filename)
    with open(name, encoding="utf-8") as file:
        text = file.read()
    return _Parser(text, str(name)).parse()