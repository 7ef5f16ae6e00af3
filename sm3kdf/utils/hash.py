from __future__ import annotations

from typing import Optional

from sm3kdf.core.hmac import HmacSM3, get_prf
from sm3kdf.core.pbkdf2 import derive_key
from sm3kdf.core.sm3 import sm3_hex  # noqa: F401


def hmac_sm3(key: bytes, data: bytes) -> bytes:
    """HMAC-SM3 of a single message."""
    engine = HmacSM3()
    try:
        engine.init(key)
        return engine.do_final(data)
    finally:
        engine.destroy()


def hmac_digest(prf_algorithm: str, key: bytes, data: bytes) -> bytes:
    engine = get_prf(prf_algorithm)()
    try:
        engine.init(key)
        return engine.do_final(data)
    finally:
        engine.destroy()


def pbkdf2_hmac_sm3(password: Optional[str], salt: bytes, iterations: int = 10000,
                    dklen: int = 32) -> bytes:
    """PBKDF2-HmacSM3 with the key length given in bytes."""
    return derive_key(password, salt, iterations, dklen * 8, "HmacSM3")


def pbkdf2_hmac(prf_algorithm: str, password: Optional[str], salt: bytes,
                iterations: int, dklen: int) -> bytes:
    return derive_key(password, salt, iterations, dklen * 8, prf_algorithm)
