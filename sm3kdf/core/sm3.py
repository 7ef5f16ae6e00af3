"""
SM3 hash state over the gmssl compression function.

gmssl only offers one-shot hashing, so the Merkle-Damgard buffering,
padding and length encoding live here. That gives SM3 the same
``update`` / ``digest`` / ``copy`` surface as the hashlib objects, which
is what the HMAC engine streams into and clones.
"""

from __future__ import annotations

import struct
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

from gmssl import sm3 as gmssl_sm3

from sm3kdf.core.secret import wipe

SM3_BLOCK_SIZE = 64
SM3_DIGEST_SIZE = 32

_IV = tuple(gmssl_sm3.IV)


class SM3State:
    """Streaming SM3: running chaining value, partial block and byte count."""

    name = "sm3"
    block_size = SM3_BLOCK_SIZE
    digest_size = SM3_DIGEST_SIZE

    def __init__(self, data: Optional[bytes] = None):
        self._v = list(_IV)
        self._buffer = bytearray()
        self._count = 0
        if data is not None:
            self.update(data)

    def update(self, data) -> None:
        length = len(data)
        if not length:
            return
        self._count += length
        buf = self._buffer
        buf += data
        full = len(buf) - len(buf) % SM3_BLOCK_SIZE
        if not full:
            return
        v = self._v
        for off in range(0, full, SM3_BLOCK_SIZE):
            v = gmssl_sm3.sm3_cf(v, buf[off:off + SM3_BLOCK_SIZE])
        self._v = v
        buf[:full] = bytes(full)
        del buf[:full]

    def digest(self) -> bytes:
        tail = bytearray(self._buffer)
        try:
            tail.append(0x80)
            tail += bytes((56 - len(tail) % SM3_BLOCK_SIZE) % SM3_BLOCK_SIZE)
            tail += ((self._count * 8) & 0xFFFFFFFFFFFFFFFF).to_bytes(8, "big")
            v = self._v
            for off in range(0, len(tail), SM3_BLOCK_SIZE):
                v = gmssl_sm3.sm3_cf(v, tail[off:off + SM3_BLOCK_SIZE])
            return struct.pack(">8I", *v)
        finally:
            wipe(tail)

    def hexdigest(self) -> str:
        return self.digest().hex()

    def copy(self) -> "SM3State":
        twin = SM3State.__new__(SM3State)
        twin._v = list(self._v)
        twin._buffer = bytearray(self._buffer)
        twin._count = self._count
        return twin

    def __del__(self):
        buf = getattr(self, "_buffer", None)
        if buf is not None:
            wipe(buf)


def sm3_digest(data: bytes) -> bytes:
    return SM3State(data).digest()


def sm3_hex(data: bytes) -> str:
    return sm3_digest(data).hex()


def sm3_batch(data_items: Iterable[bytes], max_workers: int = 0) -> List[bytes]:
    """Batch SM3 hashing with optional threading."""
    items = list(data_items)
    if not items:
        return []
    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(sm3_digest, items))
    return [sm3_digest(item) for item in items]
