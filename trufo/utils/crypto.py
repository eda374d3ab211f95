"""AES-256-CBC content encryption at rest.

Stored blobs look like ``<iv_hex>:<ciphertext_hex>``. The plaintext is the
compact JSON text of the value, so strings and booleans survive the round
trip with their type intact.

Decryption never raises for bad input. Blobs without a separator predate
encryption and are read as plain JSON; anything that cannot be decrypted
comes back as :class:`Degraded` carrying the raw stored string.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger(__name__)

KEY_LENGTH = 32  # AES-256
IV_LENGTH = 16
SEPARATOR = ":"


@dataclass(frozen=True)
class Decrypted:
    value: Any

    degraded = False


@dataclass(frozen=True)
class Degraded:
    raw: str

    degraded = True

    @property
    def value(self) -> str:
        return self.raw


DecryptResult = Decrypted | Degraded


def derive_key(secret: str) -> bytes:
    """Zero-pad or truncate the configured secret to exactly 32 bytes."""
    raw = secret.encode("utf-8")
    return raw[:KEY_LENGTH].ljust(KEY_LENGTH, b"\0")


class ContentCodec:
    def __init__(self, secret: str):
        self._key = derive_key(secret)

    def encrypt(self, value: Any) -> str:
        plaintext = json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        iv = os.urandom(IV_LENGTH)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{iv.hex()}{SEPARATOR}{ciphertext.hex()}"

    def decrypt(self, blob: str) -> DecryptResult:
        if SEPARATOR not in blob:
            # Written before encryption was enabled
            try:
                return Decrypted(json.loads(blob))
            except ValueError:
                return Degraded(blob)

        iv_hex, ciphertext_hex = blob.split(SEPARATOR, 1)
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return Decrypted(json.loads(plaintext.decode("utf-8")))
        except ValueError as exc:
            logger.warning("Content decryption failed, returning stored value: %s", type(exc).__name__)
            return Degraded(blob)
