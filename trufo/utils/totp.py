"""TOTP second factor (RFC 6238 over RFC 4226 HOTP, SHA-1, 6 digits, 30 s)."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import struct
from urllib.parse import quote, urlencode

TIME_STEP_MS = 30_000
DIGITS = 6
DRIFT_STEPS = 1
SECRET_BYTES = 20  # 160 bits


def generate_secret() -> str:
    """Random base32 secret, unpadded (20 bytes encode to 32 chars)."""
    return base64.b32encode(secrets.token_bytes(SECRET_BYTES)).decode("ascii").rstrip("=")


def _decode_secret(secret: str) -> bytes:
    normalized = secret.strip().replace(" ", "").upper()
    normalized += "=" * (-len(normalized) % 8)
    return base64.b32decode(normalized)


def hotp(secret: str, counter: int) -> str:
    digest = hmac.new(_decode_secret(secret), struct.pack(">Q", counter), hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    binary = struct.unpack(">I", digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(binary % 10**DIGITS).zfill(DIGITS)


def time_step(now_ms: int) -> int:
    return now_ms // TIME_STEP_MS


def verify(secret: str, code: str, now_ms: int) -> bool:
    """Accept the code for the current step or one step either side."""
    if not code or len(code) != DIGITS or not (code.isascii() and code.isdigit()):
        return False
    step = time_step(now_ms)
    matched = False
    for candidate in range(step - DRIFT_STEPS, step + DRIFT_STEPS + 1):
        if candidate < 0:
            continue
        # no early exit, keep timing independent of which step matched
        matched |= hmac.compare_digest(hotp(secret, candidate), code)
    return matched


def provisioning_uri(secret: str, account: str, issuer: str) -> str:
    label = quote(f"{issuer}:{account}", safe=":")
    return f"otpauth://totp/{label}?" + urlencode({"secret": secret, "issuer": issuer})
