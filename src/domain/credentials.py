"""
Credential hashing - one-way password encoding and constant-time verification.

Encoded hashes are self-describing, prefixed with an algorithm tag:

    scrypt:<salt hex>:<derived key hex>
    bcrypt:<bcrypt modular crypt string>

scrypt (N=16384, r=8, p=1, 16-byte salt, 64-byte key) is the default.
The scrypt parameters are fixed because they are not part of the encoding;
changing them would invalidate every stored hash.

Verification never raises: malformed, empty or unknown encodings simply
fail to verify. Derived keys are compared with secrets.compare_digest so
that the comparison does not leak how many leading bytes matched.
"""

import hashlib
import secrets
from dataclasses import dataclass
from functools import cached_property

import bcrypt

from .exceptions import InvalidInput

SCRYPT_TAG = "scrypt"
BCRYPT_TAG = "bcrypt"

SALT_BYTES = 16
KEY_LENGTH = 64
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
# 128 * r * N bytes are needed; leave headroom above the hashlib default.
SCRYPT_MAXMEM = 64 * 1024 * 1024


def _scrypt(password: str, salt: bytes, length: int) -> bytes:
    return hashlib.scrypt(
        password.encode(),
        salt=salt,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        maxmem=SCRYPT_MAXMEM,
        dklen=length,
    )


@dataclass(frozen=True)
class CredentialHasher:
    """
    Hashes and verifies passwords and verification codes.

    Attributes:
        algorithm: Tag used for new hashes ("scrypt" or "bcrypt")
        bcrypt_rounds: bcrypt work factor when algorithm is "bcrypt"
    """

    algorithm: str = SCRYPT_TAG
    bcrypt_rounds: int = 10

    def __post_init__(self) -> None:
        if self.algorithm not in (SCRYPT_TAG, BCRYPT_TAG):
            raise ValueError(f"Unsupported hash algorithm: {self.algorithm}")

    def hash(self, password: str) -> str:
        """
        Hash a secret with a fresh random salt.

        Raises:
            InvalidInput: If password is not a non-empty string
        """
        if not isinstance(password, str) or not password:
            raise InvalidInput("Password must be a non-empty string.")

        if self.algorithm == BCRYPT_TAG:
            try:
                hashed = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_rounds))
            except ValueError as e:
                # bcrypt refuses secrets longer than 72 bytes
                raise InvalidInput(str(e)) from e
            return f"{BCRYPT_TAG}:{hashed.decode()}"

        salt = secrets.token_bytes(SALT_BYTES)
        try:
            key = _scrypt(password, salt, KEY_LENGTH)
        except ValueError as e:
            # Unencodable text, e.g. a lone surrogate
            raise InvalidInput("Password contains characters that cannot be encoded.") from e
        return f"{SCRYPT_TAG}:{salt.hex()}:{key.hex()}"

    def verify(self, password: str, encoded: str) -> bool:
        """Return True if password matches the encoded hash, False otherwise."""
        if not isinstance(password, str) or not isinstance(encoded, str) or not encoded:
            return False

        algorithm, _, payload = encoded.partition(":")
        if algorithm == SCRYPT_TAG:
            return self._verify_scrypt(password, payload)
        if algorithm == BCRYPT_TAG:
            return self._verify_bcrypt(password, payload)
        return False

    @cached_property
    def dummy_hash(self) -> str:
        """Hash of a throwaway secret, for equal-cost checks on unknown accounts."""
        return self.hash(secrets.token_urlsafe(16))

    def _verify_scrypt(self, password: str, payload: str) -> bool:
        salt_hex, sep, key_hex = payload.partition(":")
        if not sep or not salt_hex or not key_hex:
            return False
        try:
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(key_hex)
            actual = _scrypt(password, salt, len(expected))
        except ValueError:
            return False
        return secrets.compare_digest(actual, expected)

    def _verify_bcrypt(self, password: str, payload: str) -> bool:
        if not payload:
            return False
        try:
            return bcrypt.checkpw(password.encode(), payload.encode())
        except ValueError:
            return False
