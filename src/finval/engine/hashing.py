from __future__ import annotations
import hmac, hashlib, base64, os
from dataclasses import dataclass

@dataclass
class PasswordHasher:
    """
    Derives the only form of a password that is ever persisted.

    - PBKDF2-HMAC-SHA256 with a random per-password salt.
    - Encoded as `pbkdf2_sha256$<iterations>$<salt>$<digest>` (base64, no padding),
      so the iteration count can be raised later without breaking stored hashes.
    - The password is hashed exactly as typed; it is never trimmed or case folded.
    """
    iterations: int = 390_000
    salt_bytes: int = 16

    algorithm = "pbkdf2_sha256"

    @staticmethod
    def _b64(raw: bytes) -> str:
        return base64.b64encode(raw).decode("ascii").rstrip("=")

    @staticmethod
    def _unb64(text: str) -> bytes:
        return base64.b64decode(text + "=" * (-len(text) % 4))

    def _derive(self, password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)

    def hash(self, password: str) -> str:
        salt = os.urandom(self.salt_bytes)
        digest = self._derive(password, salt, self.iterations)
        return f"{self.algorithm}${self.iterations}${self._b64(salt)}${self._b64(digest)}"

    def verify(self, password: str, encoded: str) -> bool:
        try:
            algorithm, iterations, salt, digest = encoded.split("$")
            rounds = int(iterations)
            salt_raw, expected = self._unb64(salt), self._unb64(digest)
        except ValueError:  # includes binascii.Error
            return False
        if algorithm != self.algorithm:
            return False
        candidate = self._derive(password, salt_raw, rounds)
        return hmac.compare_digest(candidate, expected)

def hasher_from_env(default_iterations: int | None = None) -> PasswordHasher:
    """
    Prefer FINVAL_HASH_ITERATIONS when set (tests lower it to keep runs fast).
    """
    env = os.getenv("FINVAL_HASH_ITERATIONS")
    if env:
        return PasswordHasher(iterations=int(env))
    return PasswordHasher(iterations=default_iterations) if default_iterations else PasswordHasher()
