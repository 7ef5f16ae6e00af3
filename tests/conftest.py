import pytest
from gmssl import func as gmssl_func
from gmssl import sm3 as gmssl_sm3

from sm3kdf import config
from sm3kdf.core.hmac import HmacSM3

KEY = bytes.fromhex("0123456789abcdef0123456789abcdef")
MESSAGE = bytes.fromhex("616263")


def reference_sm3(data: bytes) -> bytes:
    return bytes.fromhex(gmssl_sm3.sm3_hash(gmssl_func.bytes_to_list(data)))


def reference_hmac_sm3(key: bytes, data: bytes) -> bytes:
    if len(key) > 64:
        key = reference_sm3(key)
    key = key.ljust(64, b"\x00")
    inner = reference_sm3(bytes(b ^ 0x36 for b in key) + data)
    return reference_sm3(bytes(b ^ 0x5C for b in key) + inner)


def reference_pbkdf2_sm3(password: bytes, salt: bytes, iterations: int, dklen: int) -> bytes:
    out = b""
    index = 1
    while len(out) < dklen:
        u = reference_hmac_sm3(password, salt + index.to_bytes(4, "big"))
        t = u
        for _ in range(iterations - 1):
            u = reference_hmac_sm3(password, u)
            t = bytes(a ^ b for a, b in zip(t, u))
        out += t
        index += 1
    return out[:dklen]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test from the built-in defaults, whatever the shell has set."""
    for name in list(config.PROFILES["default"]) + ["SM3KDF_PROFILE"]:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    yield


@pytest.fixture
def hmac_sm3():
    engine = HmacSM3()
    engine.init(KEY)
    yield engine
    engine.destroy()
