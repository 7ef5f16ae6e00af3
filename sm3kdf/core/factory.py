"""
PBKDF2 key factories: move between ``PBEKeySpec`` and ``PBKDF2Key`` and
re-home password keys produced elsewhere.

Requests are checked against the ``kind`` tag carried by every spec and
key. Buffers copied out of a key for a translation are wiped on every
exit path.
"""

from __future__ import annotations

from types import MappingProxyType

from sm3kdf.core.hmac import PRF_ALGORITHMS, get_prf
from sm3kdf.core.keys import KeyKind, PBEKeySpec, PBKDF2Key, SpecKind
from sm3kdf.core.secret import wipe
from sm3kdf.errors import (
    InvalidKeyError,
    InvalidKeySpecError,
    InvalidParameterError,
    KeyStateError,
)
from sm3kdf.utils.console import print_debug
from sm3kdf.utils.validation import validate_derivation_parameters


class PBKDF2KeyFactory:
    """Key factory for one PRF, e.g. ``PBKDF2KeyFactory("HmacSM3")``."""

    def __init__(self, prf_algorithm: str):
        prf = get_prf(prf_algorithm)
        self.prf_algorithm = prf.algorithm
        self.mac_length = prf.digest.digest_size
        self.algorithm = "PBKDF2With" + self.prf_algorithm

    def generate_secret(self, key_spec) -> PBKDF2Key:
        """Build a key from a ``PBEKeySpec``."""
        if key_spec is None or getattr(key_spec, "kind", None) is not SpecKind.PBE:
            raise InvalidKeySpecError("Only PBEKeySpec is accepted")
        return PBKDF2Key(key_spec, self.prf_algorithm)

    def get_key_spec(self, key, spec_kind: SpecKind = SpecKind.PBE) -> PBEKeySpec:
        """Describe a password key as a ``PBEKeySpec``."""
        if key is None or getattr(key, "kind", None) not in (KeyKind.PBE, KeyKind.PBKDF2):
            raise InvalidKeySpecError("Only PBEKey is accepted")
        if spec_kind is not SpecKind.PBE:
            raise InvalidKeySpecError("Only PBEKeySpec is accepted")
        encoded = key.get_encoded()
        salt = None
        try:
            salt = key.get_salt()
            return PBEKeySpec(key.get_password(), salt,
                              key.get_iteration_count(), len(encoded) * 8)
        finally:
            wipe(salt)
            wipe(encoded)

    def translate_key(self, key) -> PBKDF2Key:
        """
        Turn a key from an unknown source into one of this factory's keys.

        Our own keys for the same PRF are returned unchanged once their
        parameters pass the current policy; other password keys are
        re-derived.
        """
        if (key is None
                or str(getattr(key, "algorithm", "")).lower() != self.algorithm.lower()
                or str(getattr(key, "format", "")).upper() != "RAW"):
            raise InvalidKeyError(f"Only {self.algorithm} key with RAW format is accepted")

        kind = getattr(key, "kind", None)
        if kind is KeyKind.PBKDF2:
            salt = None
            try:
                salt = key.get_salt()
                validate_derivation_parameters(
                    salt, key.get_iteration_count(), key.get_key_length(),
                    self.mac_length)
            except (InvalidParameterError, KeyStateError) as exc:
                raise InvalidKeyError("Invalid key component(s)") from exc
            finally:
                wipe(salt)
            return key

        if kind is not KeyKind.PBE:
            raise InvalidKeyError("Only PBEKey is accepted")

        print_debug(f"Translating foreign {key.algorithm} key")
        encoded = key.get_encoded()
        salt = None
        spec = None
        try:
            salt = key.get_salt()
            spec = PBEKeySpec(key.get_password(), salt,
                              key.get_iteration_count(), len(encoded) * 8)
            return PBKDF2Key(spec, self.prf_algorithm)
        except (InvalidParameterError, InvalidKeySpecError) as exc:
            raise InvalidKeyError("Invalid key component(s)") from exc
        finally:
            if spec is not None:
                spec.clear()
            wipe(salt)
            wipe(encoded)

    def __repr__(self) -> str:
        return f"PBKDF2KeyFactory({self.prf_algorithm!r})"


KEY_FACTORIES = MappingProxyType({
    "PBKDF2With" + name: PBKDF2KeyFactory(name) for name in PRF_ALGORITHMS
})


def get_key_factory(algorithm: str) -> PBKDF2KeyFactory:
    """Look up a factory by ``PBKDF2With<prf>`` name, ignoring case."""
    wanted = str(algorithm or "").lower()
    for name, factory in KEY_FACTORIES.items():
        if name.lower() == wanted:
            return factory
    raise InvalidParameterError(f"Unsupported key factory algorithm: {algorithm}")
