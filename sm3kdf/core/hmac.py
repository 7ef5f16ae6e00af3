"""
HMAC engine (RFC 2104) over any ``HashPrimitive``.

The engine is keyed once with ``init`` and then MACs any number of
messages: ``do_final`` returns the tag and puts the engine back in its
freshly keyed state. ``clone`` forks the complete streaming state so two
continuations of a shared prefix can be computed independently, or so
each thread can get its own engine.

ipad/opad are kept in ``SecretBuffer``s and wiped on re-key or destroy.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Optional, Protocol

from sm3kdf import config
from sm3kdf.core.digest import SM3, SHA1, SHA224, SHA256, SHA384, SHA512, HashPrimitive
from sm3kdf.core.secret import SecretBuffer
from sm3kdf.errors import (
    InvalidArgumentError,
    InvalidKeyError,
    InvalidParameterError,
    KeyStateError,
)

_TRANS_36 = bytes((x ^ 0x36) for x in range(256))
_TRANS_5C = bytes((x ^ 0x5C) for x in range(256))


class PRF(Protocol):
    """What PBKDF2 needs from its pseudorandom function."""

    algorithm: str
    mac_length: int

    def init(self, key) -> None: ...

    def update(self, data) -> None: ...

    def do_final(self) -> bytes: ...

    def do_final_into(self, out: bytearray, offset: int = 0) -> int: ...

    def clone(self) -> "PRF": ...

    def destroy(self) -> None: ...


def _byte_view(data) -> memoryview:
    view = memoryview(data)
    if not view.c_contiguous:
        view = memoryview(view.tobytes())
    return view.cast("B")


class HmacEngine:
    """Streaming HMAC. Not thread safe; clone() one per thread."""

    digest: Optional[HashPrimitive] = None
    algorithm: str = ""

    def __init__(self, digest: Optional[HashPrimitive] = None,
                 reject_empty_key: Optional[bool] = None):
        if digest is not None:
            self.digest = digest
            self.algorithm = "Hmac" + digest.name
        if self.digest is None:
            raise InvalidParameterError("HmacEngine needs a hash primitive")
        self.block_size = self.digest.block_size
        self.mac_length = self.digest.digest_size
        # None means: ask config at init() time.
        self._reject_empty_key = reject_empty_key
        self._ipad: Optional[SecretBuffer] = None
        self._opad: Optional[SecretBuffer] = None
        self._inner_start = None
        self._outer_start = None
        self._inner = None

    @property
    def initialized(self) -> bool:
        return self._inner is not None

    def init(self, key) -> None:
        """Key the engine, replacing (and wiping) any previous key."""
        if key is None:
            raise InvalidKeyError("Missing HMAC key")
        key = _byte_view(key)
        reject = self._reject_empty_key
        if reject is None:
            reject = config.reject_empty_hmac_key()
        if reject and len(key) == 0:
            raise InvalidKeyError(f"{self.algorithm} key must not be empty")

        self.destroy()
        with SecretBuffer(self.block_size) as padded:
            if len(key) > self.block_size:
                material = bytearray(self.digest.hash(key))
            else:
                material = bytearray(key)
            with SecretBuffer.adopt(material):
                padded.data[:len(material)] = material
            self._ipad = SecretBuffer.adopt(padded.data.translate(_TRANS_36))
            self._opad = SecretBuffer.adopt(padded.data.translate(_TRANS_5C))

        self._inner_start = self.digest.new(self._ipad.view())
        self._outer_start = self.digest.new(self._opad.view())
        self._inner = self._inner_start.copy()

    def _check_initialized(self) -> None:
        if self._inner is None:
            raise KeyStateError(f"{self.algorithm or 'HMAC'} not initialized")

    def update(self, data, offset: int = 0, length: Optional[int] = None) -> None:
        """Feed data[offset:offset + length]. None is treated as empty input."""
        self._check_initialized()
        if data is None:
            return
        view = _byte_view(data)
        if length is None:
            length = len(view) - offset
        if offset < 0 or length < 0 or offset + length > len(view):
            raise InvalidArgumentError(
                f"Bad window offset={offset} length={length} for {len(view)} bytes")
        if length:
            self._inner.update(view[offset:offset + length])

    def update_byte(self, value: int) -> None:
        self._check_initialized()
        if not 0 <= value <= 0xFF:
            raise InvalidArgumentError(f"Byte value out of range: {value}")
        self._inner.update(bytes((value,)))

    def update_buffer(self, buffer) -> None:
        """Feed a buffer object (e.g. a memoryview window); None is rejected."""
        self._check_initialized()
        if buffer is None:
            raise InvalidArgumentError("Buffer must not be None")
        self.update(buffer)

    def do_final(self, data=None) -> bytes:
        """Finish the message and return the MAC; the key stays loaded."""
        self._check_initialized()
        if data is not None:
            self.update(data)
        inner_digest = self._inner.digest()
        outer = self._outer_start.copy()
        outer.update(inner_digest)
        self._inner = self._inner_start.copy()
        return outer.digest()

    def do_final_into(self, out: bytearray, offset: int = 0) -> int:
        """Write the MAC into out[offset:], returning the number of bytes written."""
        if out is None:
            raise InvalidArgumentError("Output buffer must not be None")
        if offset < 0 or len(out) - offset < self.mac_length:
            raise InvalidArgumentError("Output buffer too short")
        out[offset:offset + self.mac_length] = self.do_final()
        return self.mac_length

    def reset(self) -> None:
        """Drop any buffered message, keeping the key."""
        if self._inner_start is not None:
            self._inner = self._inner_start.copy()

    def clone(self) -> "HmacEngine":
        twin = object.__new__(type(self))
        twin.__dict__.update(self.__dict__)
        if self._ipad is not None:
            twin._ipad = self._ipad.clone()
            twin._opad = self._opad.clone()
            twin._inner_start = self._inner_start.copy()
            twin._outer_start = self._outer_start.copy()
            twin._inner = self._inner.copy()
        return twin

    def __copy__(self) -> "HmacEngine":
        return self.clone()

    def __deepcopy__(self, memo) -> "HmacEngine":
        return self.clone()

    def destroy(self) -> None:
        """Wipe the pads and go back to the uninitialized state."""
        if self._ipad is not None:
            self._ipad.wipe()
        if self._opad is not None:
            self._opad.wipe()
        self._ipad = self._opad = None
        self._inner_start = self._outer_start = self._inner = None

    def __repr__(self) -> str:
        state = "initialized" if self.initialized else "uninitialized"
        return f"<{self.algorithm} {state}>"


class HmacSM3(HmacEngine):
    digest = SM3
    algorithm = "HmacSM3"


class HmacSHA1(HmacEngine):
    digest = SHA1
    algorithm = "HmacSHA1"


class HmacSHA224(HmacEngine):
    digest = SHA224
    algorithm = "HmacSHA224"


class HmacSHA256(HmacEngine):
    digest = SHA256
    algorithm = "HmacSHA256"


class HmacSHA384(HmacEngine):
    digest = SHA384
    algorithm = "HmacSHA384"


class HmacSHA512(HmacEngine):
    digest = SHA512
    algorithm = "HmacSHA512"


PRF_ALGORITHMS = MappingProxyType({
    cls.algorithm: cls
    for cls in (HmacSM3, HmacSHA1, HmacSHA224, HmacSHA256, HmacSHA384, HmacSHA512)
})


def get_prf(name: str):
    """Resolve a PRF class by name, ignoring case (``hmacsm3`` works)."""
    wanted = str(name or "").lower()
    for algorithm, cls in PRF_ALGORITHMS.items():
        if algorithm.lower() == wanted:
            return cls
    raise InvalidParameterError(f"Unsupported PRF algorithm: {name}")
