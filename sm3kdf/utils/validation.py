from typing import Optional

from sm3kdf import config
from sm3kdf.errors import InvalidParameterError

# PBKDF2 numbers its blocks with a 32-bit big-endian counter.
MAX_PBKDF2_BLOCKS = 0xFFFFFFFF


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_iteration_count(iteration_count) -> int:
    if not _is_int(iteration_count) or iteration_count < 1:
        raise InvalidParameterError(
            f"Iteration count must be a positive integer, got {iteration_count!r}")
    ceiling = config.max_iteration_count()
    if ceiling and iteration_count > ceiling:
        raise InvalidParameterError(
            f"Iteration count {iteration_count} exceeds the configured ceiling {ceiling}")
    return iteration_count


def validate_output_bits(output_bits) -> int:
    """Check a key length in bits and return it in bytes."""
    if not _is_int(output_bits) or output_bits <= 0:
        raise InvalidParameterError(
            f"Key length must be a positive integer, got {output_bits!r}")
    if output_bits % 8 != 0:
        raise InvalidParameterError(
            f"Key length must be a multiple of 8 bits, got {output_bits}")
    return output_bits // 8


def validate_block_count(dk_len: int, mac_length: int) -> int:
    """Number of PRF blocks needed for dk_len bytes."""
    if dk_len > MAX_PBKDF2_BLOCKS * mac_length:
        raise InvalidParameterError("Requested key length too long")
    return -(-dk_len // mac_length)


def validate_salt(salt: Optional[bytes]) -> None:
    if salt is None:
        raise InvalidParameterError("Salt must not be None")
    minimum = config.min_salt_bytes()
    if len(salt) < minimum:
        raise InvalidParameterError(
            f"Salt must be at least {minimum} bytes, got {len(salt)}")


def validate_derivation_parameters(salt, iteration_count, output_bits, mac_length: int) -> int:
    """Validate everything a derivation needs up front; returns the key length in bytes."""
    validate_salt(salt)
    validate_iteration_count(iteration_count)
    dk_len = validate_output_bits(output_bits)
    validate_block_count(dk_len, mac_length)
    return dk_len
