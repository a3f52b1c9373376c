"""Byte-buffer allocators, a bounded array, a growable byte buffer and a key-value config format."""

__version__ = "0.1.0"
__all__ = ["region", "bistack", "objpool", "mempool", "array", "bytebuffer", "cfg", "cfgparse"]