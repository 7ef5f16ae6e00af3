"""Runtime configuration profiles for sm3kdf."""
from __future__ import annotations

import os
from typing import Dict

PROFILE = os.getenv("SM3KDF_PROFILE", "default")

PROFILES: Dict[str, Dict[str, str]] = {
    "default": {
        "SM3KDF_MIN_SALT_BYTES": "0",
        "SM3KDF_MAX_ITERATIONS": "0",
        "SM3KDF_REJECT_EMPTY_HMAC_KEY": "0",
        "SM3KDF_DEFAULT_PRF": "HmacSM3",
        "SM3KDF_DEBUG": "0",
    },
    "strict": {
        "SM3KDF_MIN_SALT_BYTES": "16",
        "SM3KDF_MAX_ITERATIONS": "0",
        "SM3KDF_REJECT_EMPTY_HMAC_KEY": "1",
        "SM3KDF_DEFAULT_PRF": "HmacSM3",
        "SM3KDF_DEBUG": "0",
    },
}

_DEFAULTS = PROFILES["default"]


def apply_profile() -> None:
    profile = os.getenv("SM3KDF_PROFILE", PROFILE)
    if not profile:
        return
    settings = PROFILES.get(profile)
    if not settings:
        return
    for key, value in settings.items():
        os.environ.setdefault(key, value)


def _env_int(name: str) -> int:
    raw = os.getenv(name, _DEFAULTS[name]).strip()
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_flag(name: str) -> bool:
    return os.getenv(name, _DEFAULTS[name]).strip().lower() in ("1", "true", "yes", "on")


def min_salt_bytes() -> int:
    """Shortest salt a key container accepts (0 = only non-None is required)."""
    return max(0, _env_int("SM3KDF_MIN_SALT_BYTES"))


def max_iteration_count() -> int:
    """Iteration ceiling for a single derivation, 0 when unbounded."""
    return max(0, _env_int("SM3KDF_MAX_ITERATIONS"))


def reject_empty_hmac_key() -> bool:
    return _env_flag("SM3KDF_REJECT_EMPTY_HMAC_KEY")


def default_prf() -> str:
    return os.getenv("SM3KDF_DEFAULT_PRF", _DEFAULTS["SM3KDF_DEFAULT_PRF"]).strip() or "HmacSM3"


def debug_enabled() -> bool:
    return _env_flag("SM3KDF_DEBUG")
