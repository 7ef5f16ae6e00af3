"""
Owned, zeroable buffers for passwords, salts, pads and derived keys.

Python ``bytes`` and ``str`` are immutable and cannot be overwritten, so
everything sensitive that sm3kdf holds on to lives in a ``bytearray``
owned by a ``SecretBuffer``. The buffer is zeroed when it is wiped
explicitly, when a ``with`` block around it exits, or when it is
garbage collected.
"""

from __future__ import annotations

from typing import Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]


def wipe(buf) -> None:
    """Zero a mutable buffer in place. Immutable objects are left alone."""
    if buf is None:
        return
    if isinstance(buf, bytearray):
        # Same-length slice assignment writes in place, no reallocation.
        buf[:] = bytes(len(buf))
        return
    if isinstance(buf, memoryview) and not buf.readonly:
        if buf.c_contiguous:
            flat = buf.cast("B")
            flat[:] = bytes(flat.nbytes)


class SecretBuffer:
    """A bytearray that is zeroed on wipe, on context exit and on collection."""

    __slots__ = ("_data", "_wiped", "__weakref__")

    def __init__(self, initial: Union[int, BytesLike, None] = 0):
        self._data = bytearray(initial or 0)
        self._wiped = False

    @classmethod
    def adopt(cls, data: bytearray) -> "SecretBuffer":
        """Take ownership of an existing bytearray without copying it."""
        if not isinstance(data, bytearray):
            raise TypeError("SecretBuffer.adopt() needs a bytearray")
        buf = cls.__new__(cls)
        buf._data = data
        buf._wiped = False
        return buf

    @property
    def data(self) -> bytearray:
        return self._data

    @property
    def wiped(self) -> bool:
        return self._wiped

    def view(self) -> memoryview:
        return memoryview(self._data).toreadonly()

    def copy(self) -> bytearray:
        return bytearray(self._data)

    def clone(self) -> "SecretBuffer":
        twin = SecretBuffer(self._data)
        twin._wiped = self._wiped
        return twin

    def wipe(self) -> None:
        wipe(self._data)
        self._wiped = True

    def __len__(self) -> int:
        return len(self._data)

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self):
        data: Optional[bytearray] = getattr(self, "_data", None)
        if data is not None:
            wipe(data)

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else f"{len(self._data)} bytes"
        return f"<SecretBuffer {state}>"
