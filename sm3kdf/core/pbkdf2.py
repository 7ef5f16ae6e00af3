"""
PBKDF2 (PKCS #5 v2.1, RFC 8018 section 5.2) over an HMAC PRF.

    DK = T1 || T2 || ... || Tl          (truncated to dkLen)
    Ti = U1 ^ U2 ^ ... ^ Uc
    U1 = PRF(P, S || INT_32_BE(i)),  Uj = PRF(P, Uj-1)

The PRF is keyed with the password once per derivation; only the
messages fed through it change. U and the output blocks live in
bytearrays that are zeroed before the call returns or raises.
"""

from __future__ import annotations

import struct
from typing import Callable, Optional

from sm3kdf import config
from sm3kdf.core.hmac import PRF, get_prf
from sm3kdf.core.secret import SecretBuffer, wipe
from sm3kdf.errors import InvalidParameterError
from sm3kdf.utils.console import print_debug
from sm3kdf.utils.validation import (
    validate_block_count,
    validate_iteration_count,
    validate_output_bits,
    validate_salt,
)


class PBKDF2Engine:
    """
    Derives keys with one PRF instance.

    The PRF is re-keyed for every derivation, so an engine must not be
    shared between threads; build one per thread.
    """

    def __init__(self, prf: Callable[[], PRF]):
        self._prf = prf()
        self.prf_algorithm = self._prf.algorithm
        self.mac_length = self._prf.mac_length

    def derive_into(self, out: bytearray, password, salt, iteration_count: int) -> None:
        """Fill ``out`` with len(out) bytes of derived key."""
        if not isinstance(out, bytearray) or not out:
            raise InvalidParameterError("Output buffer must be a non-empty bytearray")
        if salt is None:
            raise InvalidParameterError("Salt must not be None")
        validate_iteration_count(iteration_count)
        dk_len = len(out)
        h_len = self.mac_length
        blocks = validate_block_count(dk_len, h_len)
        if password is None:
            password = b""

        print_debug(
            f"PBKDF2With{self.prf_algorithm}: iterations={iteration_count} "
            f"dk_len={dk_len} blocks={blocks}")

        prf = self._prf
        u = bytearray(h_len)
        block = bytearray(h_len)
        counter = bytearray(4)
        try:
            prf.init(password)
            for index in range(1, blocks + 1):
                struct.pack_into(">I", counter, 0, index)
                prf.update(salt)
                prf.update(counter)
                prf.do_final_into(u)
                block[:] = u
                for _ in range(iteration_count - 1):
                    prf.update(u)
                    prf.do_final_into(u)
                    for k in range(h_len):
                        block[k] ^= u[k]
                start = (index - 1) * h_len
                take = min(h_len, dk_len - start)
                out[start:start + take] = memoryview(block)[:take]
        except BaseException:
            wipe(out)
            raise
        finally:
            wipe(u)
            wipe(block)
            wipe(counter)
            prf.destroy()

    def derive(self, password, salt, iteration_count: int, output_bits: int) -> bytes:
        dk_len = validate_output_bits(output_bits)
        validate_block_count(dk_len, self.mac_length)
        with SecretBuffer(dk_len) as out:
            self.derive_into(out.data, password, salt, iteration_count)
            return bytes(out.data)


def derive(prf: Callable[[], PRF], password, salt, iteration_count: int,
           output_bits: int) -> bytes:
    """
    Derive ``output_bits // 8`` bytes from ``password`` and ``salt``.

    Args:
        prf: zero-argument factory for the PRF, e.g. ``HmacSM3``.
        password: password bytes (None is treated as empty).
        salt: salt bytes.
        iteration_count: PRF iterations per block, at least 1.
        output_bits: key length in bits, a positive multiple of 8.

    Raises:
        InvalidParameterError: on any invalid parameter, before any work is done.
    """
    validate_output_bits(output_bits)
    validate_iteration_count(iteration_count)
    if salt is None:
        raise InvalidParameterError("Salt must not be None")
    return PBKDF2Engine(prf).derive(password, salt, iteration_count, output_bits)


def derive_key(password: Optional[str], salt: bytes, iteration_count: int,
               output_bits: int, prf_algorithm: Optional[str] = None) -> bytes:
    """Derive from a character password (UTF-8 encoded) with a PRF chosen by name."""
    prf = get_prf(prf_algorithm or config.default_prf())
    validate_salt(salt)
    with SecretBuffer.adopt(bytearray((password or "").encode("utf-8"))) as secret:
        return derive(prf, secret.view(), salt, iteration_count, output_bits)
