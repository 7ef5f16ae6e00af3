"""
SM3KDF - PBKDF2 and HMAC over SM3 (and the SHA family) with zeroable key material
"""
from .core.hmac import (
    HmacEngine,
    HmacSM3,
    HmacSHA1,
    HmacSHA224,
    HmacSHA256,
    HmacSHA384,
    HmacSHA512,
    PRF_ALGORITHMS,
    get_prf,
)
from .core.pbkdf2 import PBKDF2Engine, derive, derive_key
from .core.keys import KeyKind, SpecKind, PBEKeySpec, PBEKey, PBKDF2Key, RawSecretKey
from .core.factory import KEY_FACTORIES, PBKDF2KeyFactory, get_key_factory
from .core.secret import SecretBuffer
from .errors import (
    KdfError,
    InvalidParameterError,
    InvalidKeyError,
    InvalidKeySpecError,
    InvalidArgumentError,
    KeyStateError,
)

__version__ = "1.0.0"
__all__ = [
    'HmacEngine',
    'HmacSM3',
    'HmacSHA1',
    'HmacSHA224',
    'HmacSHA256',
    'HmacSHA384',
    'HmacSHA512',
    'PRF_ALGORITHMS',
    'get_prf',
    'PBKDF2Engine',
    'derive',
    'derive_key',
    'KeyKind',
    'SpecKind',
    'PBEKeySpec',
    'PBEKey',
    'PBKDF2Key',
    'RawSecretKey',
    'KEY_FACTORIES',
    'PBKDF2KeyFactory',
    'get_key_factory',
    'SecretBuffer',
    'KdfError',
    'InvalidParameterError',
    'InvalidKeyError',
    'InvalidKeySpecError',
    'InvalidArgumentError',
    'KeyStateError',
]
