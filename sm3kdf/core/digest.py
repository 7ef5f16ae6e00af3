"""
Hash primitives consumed by the HMAC engine.

A ``HashPrimitive`` publishes the block and digest sizes of one hash
function and creates fresh streaming states for it. SM3 states come from
``sm3kdf.core.sm3``, the SHA family from ``hashlib``.
"""

from __future__ import annotations

import hashlib
from types import MappingProxyType
from typing import Callable, Optional, Protocol

from sm3kdf.core.sm3 import SM3State, SM3_BLOCK_SIZE, SM3_DIGEST_SIZE
from sm3kdf.errors import InvalidParameterError


class HashState(Protocol):
    def update(self, data) -> None: ...

    def digest(self) -> bytes: ...

    def copy(self) -> "HashState": ...


class HashPrimitive:
    """Name, sizes and a state constructor for one hash function."""

    __slots__ = ("name", "block_size", "digest_size", "_factory")

    def __init__(self, name: str, block_size: int, digest_size: int,
                 factory: Callable[[], HashState]):
        self.name = name
        self.block_size = block_size
        self.digest_size = digest_size
        self._factory = factory

    def new(self, data: Optional[bytes] = None) -> HashState:
        state = self._factory()
        if data is not None:
            state.update(data)
        return state

    def hash(self, data) -> bytes:
        return self.new(data).digest()

    def __repr__(self) -> str:
        return f"HashPrimitive({self.name}, block={self.block_size}, digest={self.digest_size})"


SM3 = HashPrimitive("SM3", SM3_BLOCK_SIZE, SM3_DIGEST_SIZE, SM3State)
SHA1 = HashPrimitive("SHA1", 64, 20, hashlib.sha1)
SHA224 = HashPrimitive("SHA224", 64, 28, hashlib.sha224)
SHA256 = HashPrimitive("SHA256", 64, 32, hashlib.sha256)
SHA384 = HashPrimitive("SHA384", 128, 48, hashlib.sha384)
SHA512 = HashPrimitive("SHA512", 128, 64, hashlib.sha512)

DIGESTS = MappingProxyType({
    d.name: d for d in (SM3, SHA1, SHA224, SHA256, SHA384, SHA512)
})


def get_digest(name: str) -> HashPrimitive:
    """Look up a hash by name; case and dashes are ignored (``sha-256`` works)."""
    key = str(name or "").replace("-", "").upper()
    try:
        return DIGESTS[key]
    except KeyError:
        raise InvalidParameterError(f"Unsupported hash algorithm: {name}") from None
