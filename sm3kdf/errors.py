"""Exception types raised by sm3kdf."""


class KdfError(Exception):
    """Base class for every sm3kdf failure."""


class InvalidParameterError(KdfError, ValueError):
    """Bad iteration count, output length, salt or algorithm name."""


class InvalidKeyError(KdfError):
    """Key of the wrong kind, format or algorithm, or a rejected HMAC key."""


class InvalidKeySpecError(InvalidKeyError):
    """A factory was asked for a spec or key representation it does not support."""


class InvalidArgumentError(KdfError, ValueError):
    """A required buffer was None or a window fell outside its buffer."""


class KeyStateError(KdfError, RuntimeError):
    """Operation not allowed in the current state (uninitialized, cleared, destroyed)."""
