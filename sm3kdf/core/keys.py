"""
Password-based key specs and keys.

``PBEKeySpec`` is the declarative form (password, salt, iteration count,
key length). ``PBKDF2Key`` is the materialized form: it owns copies of
those parameters, derives its key bytes on first use and caches them.
Every key and spec carries an explicit ``kind`` tag; factories dispatch
on that tag rather than on the Python class.

All sensitive material is held in ``SecretBuffer``s. Accessors hand out
fresh copies; the caller owns (and may wipe) what it gets back.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Iterable, Optional, Union

from cryptography.hazmat.primitives import constant_time

from sm3kdf import config
from sm3kdf.core.hmac import get_prf
from sm3kdf.core.pbkdf2 import PBKDF2Engine
from sm3kdf.core.secret import SecretBuffer, wipe
from sm3kdf.errors import InvalidKeySpecError, KeyStateError
from sm3kdf.utils.validation import validate_derivation_parameters

Password = Union[str, Iterable[str], None]


class KeyKind(Enum):
    RAW = "RAW"
    PBE = "PBE"
    PBKDF2 = "PBKDF2"


class SpecKind(Enum):
    RAW = "RAW"
    PBE = "PBE"


def _password_buffer(password: Password) -> SecretBuffer:
    # Characters are stored UTF-8 encoded, which is also what PBKDF2 keys the PRF with.
    if password is None:
        return SecretBuffer()
    if isinstance(password, (bytes, bytearray, memoryview)):
        raise TypeError("password must be characters, not bytes")
    text = password if isinstance(password, str) else "".join(password)
    return SecretBuffer.adopt(bytearray(text.encode("utf-8")))


def _copy_buffer(data) -> Optional[SecretBuffer]:
    if data is None:
        return None
    return SecretBuffer(memoryview(data).cast("B"))


class PBEKeySpec:
    """Password, salt, iteration count and key length (in bits)."""

    kind = SpecKind.PBE

    def __init__(self, password: Password = None, salt=None,
                 iteration_count: int = 0, key_length: int = 0):
        self._password = _password_buffer(password)
        self._salt = _copy_buffer(salt)
        self._iteration_count = iteration_count
        self._key_length = key_length

    def get_password(self) -> str:
        if self._password.wiped:
            raise KeyStateError("Password has been cleared")
        return self._password.data.decode("utf-8")

    def _password_material(self) -> SecretBuffer:
        if self._password.wiped:
            raise KeyStateError("Password has been cleared")
        return self._password.clone()

    def get_salt(self) -> Optional[bytearray]:
        if self._salt is None:
            return None
        if self._salt.wiped:
            raise KeyStateError("Salt has been cleared")
        return self._salt.copy()

    def get_iteration_count(self) -> int:
        return self._iteration_count

    def get_key_length(self) -> int:
        return self._key_length

    def clear_password(self) -> None:
        self._password.wipe()

    def clear(self) -> None:
        """Wipe both password and salt."""
        self._password.wipe()
        if self._salt is not None:
            self._salt.wipe()

    def __enter__(self) -> "PBEKeySpec":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()

    def __repr__(self) -> str:
        return (f"PBEKeySpec(iteration_count={self._iteration_count}, "
                f"key_length={self._key_length})")


class SecretKey:
    """Base for keys: an algorithm name, an encoding format and raw bytes."""

    kind = KeyKind.RAW
    format = "RAW"

    def __init__(self, algorithm: str):
        self.algorithm = algorithm

    def get_encoded(self) -> bytearray:
        raise NotImplementedError

    def is_destroyed(self) -> bool:
        return False

    def destroy(self) -> None:
        raise NotImplementedError

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, SecretKey):
            return NotImplemented
        if self.is_destroyed() or other.is_destroyed():
            return False
        if self.algorithm.lower() != other.algorithm.lower():
            return False
        if self.format.upper() != other.format.upper():
            return False
        mine = self.get_encoded()
        theirs = other.get_encoded()
        try:
            return constant_time.bytes_eq(bytes(mine), bytes(theirs))
        finally:
            wipe(mine)
            wipe(theirs)

    def __hash__(self):
        encoded = self.get_encoded()
        try:
            return hash((self.algorithm.lower(), bytes(encoded)))
        finally:
            wipe(encoded)


class RawSecretKey(SecretKey):
    """Plain key bytes with an algorithm label, no password attached."""

    def __init__(self, encoded, algorithm: str, format: str = "RAW"):
        super().__init__(algorithm)
        self.format = format
        self._encoded = SecretBuffer(memoryview(encoded).cast("B"))

    def get_encoded(self) -> bytearray:
        if self._encoded.wiped:
            raise KeyStateError("Key has been destroyed")
        return self._encoded.copy()

    def is_destroyed(self) -> bool:
        return self._encoded.wiped

    def destroy(self) -> None:
        self._encoded.wipe()

    def __repr__(self) -> str:
        return f"<RawSecretKey {self.algorithm}>"


class PBEKey(SecretKey):
    """A password-based key whose bytes were produced elsewhere."""

    kind = KeyKind.PBE

    def __init__(self, password: Password, salt, iteration_count: int,
                 encoded, algorithm: str, format: str = "RAW"):
        super().__init__(algorithm)
        self.format = format
        self._password = _password_buffer(password)
        self._salt = _copy_buffer(salt)
        self._iteration_count = iteration_count
        self._encoded: Optional[SecretBuffer] = _copy_buffer(encoded)
        self._destroyed = False

    def _check_destroyed(self) -> None:
        if self._destroyed:
            raise KeyStateError("Key has been destroyed")

    def _materialize(self) -> SecretBuffer:
        if self._encoded is None:
            raise KeyStateError("Key has no encoding")
        return self._encoded

    def get_encoded(self) -> bytearray:
        self._check_destroyed()
        return self._materialize().copy()

    def get_password(self) -> str:
        self._check_destroyed()
        if self._password.wiped:
            raise KeyStateError("Password has been cleared")
        return self._password.data.decode("utf-8")

    def get_salt(self) -> Optional[bytearray]:
        self._check_destroyed()
        return None if self._salt is None else self._salt.copy()

    def get_iteration_count(self) -> int:
        self._check_destroyed()
        return self._iteration_count

    def get_key_length(self) -> int:
        """Key length in bits."""
        self._check_destroyed()
        return len(self._materialize()) * 8

    def clear_password(self) -> None:
        self._password.wipe()

    def is_destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        self._password.wipe()
        if self._salt is not None:
            self._salt.wipe()
        if self._encoded is not None:
            self._encoded.wipe()
        self._destroyed = True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.algorithm} iterations={self._iteration_count}>"


class PBKDF2Key(PBEKey):
    """
    Key material container for PBKDF2.

    Validates its parameters on construction, derives the key on the first
    ``get_encoded()`` and caches it until ``destroy()``. Two keys built from
    the same password, salt, iteration count, length and PRF are equal.
    """

    kind = KeyKind.PBKDF2

    def __init__(self, key_spec: PBEKeySpec, prf_algorithm: Optional[str] = None):
        if key_spec is None or getattr(key_spec, "kind", None) is not SpecKind.PBE:
            raise InvalidKeySpecError("Only PBEKeySpec is accepted")
        prf = get_prf(prf_algorithm or config.default_prf())

        salt = key_spec.get_salt()
        try:
            dk_len = validate_derivation_parameters(
                salt, key_spec.get_iteration_count(), key_spec.get_key_length(),
                prf.digest.digest_size)
            password = key_spec._password_material()
        except BaseException:
            wipe(salt)
            raise

        SecretKey.__init__(self, "PBKDF2With" + prf.algorithm)
        self.prf_algorithm = prf.algorithm
        self._prf = prf
        self._password = password
        self._salt = SecretBuffer.adopt(salt)
        self._iteration_count = key_spec.get_iteration_count()
        self._key_length = dk_len * 8
        self._encoded = None
        self._destroyed = False
        self._lock = threading.Lock()

    def _materialize(self) -> SecretBuffer:
        with self._lock:
            self._check_destroyed()
            if self._encoded is None:
                if self._password.wiped:
                    raise KeyStateError("Password was cleared before the key was derived")
                out = SecretBuffer(self._key_length // 8)
                try:
                    PBKDF2Engine(self._prf).derive_into(
                        out.data, self._password.view(), self._salt.view(),
                        self._iteration_count)
                except BaseException:
                    out.wipe()
                    raise
                self._encoded = out
            return self._encoded

    def get_key_length(self) -> int:
        self._check_destroyed()
        return self._key_length

    def clear_password(self) -> None:
        with self._lock:
            super().clear_password()

    def destroy(self) -> None:
        with self._lock:
            super().destroy()
