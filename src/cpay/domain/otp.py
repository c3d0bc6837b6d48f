"""Time-based one-time password engine.

Codes follow RFC 6238: an RFC 4226 HOTP value computed with the number of
elapsed time steps as the counter. Every pending transfer gets its own
random secret, so a code can only ever confirm the request it was issued
for.

The engine is pure. The caller supplies the instant, which keeps it
deterministic under test.
"""

import base64
import binascii
import hashlib
import hmac
import secrets
import struct
from datetime import datetime

from cpay.domain.errors import ValidationError

SECRET_BYTES = 20


class OtpEngine:
    """Generate and verify time-based one-time codes."""

    def __init__(self, step_seconds: int = 60, digits: int = 6, tolerance_steps: int = 1):
        """Initialize OTP engine.

        Args:
            step_seconds: Width of one time bucket in seconds
            digits: Number of digits in a code
            tolerance_steps: Adjacent buckets accepted on either side of the
                current one when verifying
        """
        if step_seconds <= 0:
            raise ValueError("step_seconds must be positive")
        if not 6 <= digits <= 8:
            raise ValueError("digits must be between 6 and 8")
        if tolerance_steps < 0:
            raise ValueError("tolerance_steps must not be negative")
        self.step_seconds = step_seconds
        self.digits = digits
        self.tolerance_steps = tolerance_steps

    def generate_secret(self) -> str:
        """Return a fresh base32 secret (160 random bits)."""
        return base64.b32encode(secrets.token_bytes(SECRET_BYTES)).decode("ascii")

    def time_step(self, at: datetime) -> int:
        """Return the index of the time bucket containing ``at``."""
        return int(at.timestamp()) // self.step_seconds

    def compute_code(self, secret: str, time_step: int) -> str:
        """Compute the code for a secret and time bucket.

        Raises:
            ValidationError: If the secret is not valid base32
        """
        key = _decode_secret(secret)
        digest = hmac.new(key, struct.pack(">Q", time_step), hashlib.sha1).digest()
        offset = digest[-1] & 0x0F
        value = struct.unpack(">I", digest[offset : offset + 4])[0] & 0x7FFFFFFF
        return str(value % 10**self.digits).zfill(self.digits)

    def code_at(self, secret: str, at: datetime) -> str:
        """Compute the code valid for the bucket containing ``at``."""
        return self.compute_code(secret, self.time_step(at))

    def is_well_formed(self, candidate: str) -> bool:
        """Return True if candidate has the right number of ASCII digits."""
        return (
            isinstance(candidate, str)
            and len(candidate) == self.digits
            and candidate.isascii()
            and candidate.isdigit()
        )

    def verify_code(
        self,
        secret: str,
        candidate: str,
        at: datetime,
        tolerance_steps: int | None = None,
    ) -> bool:
        """Check a candidate code against the buckets around ``at``.

        Args:
            secret: Base32 secret the code was issued for
            candidate: Code submitted by the user
            at: Verification instant
            tolerance_steps: Override for the engine tolerance

        Returns:
            True if the candidate matches the bucket of ``at`` or one of the
            ``tolerance_steps`` buckets on either side

        Raises:
            ValidationError: If the secret is not valid base32
        """
        window = self.tolerance_steps if tolerance_steps is None else tolerance_steps
        # Decode first so a malformed secret is reported even for bad candidates.
        _decode_secret(secret)
        if not self.is_well_formed(candidate):
            return False

        current = self.time_step(at)
        matched = False
        for step in range(current - window, current + window + 1):
            # No early exit, keeps timing independent of which bucket matched.
            if hmac.compare_digest(self.compute_code(secret, step), candidate):
                matched = True
        return matched


def _decode_secret(secret: str) -> bytes:
    if not isinstance(secret, str) or not secret:
        raise ValidationError("OTP secret must be a non-empty base32 string")
    padded = secret.upper() + "=" * (-len(secret) % 8)
    try:
        return base64.b32decode(padded)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Malformed OTP secret: {e}") from e
