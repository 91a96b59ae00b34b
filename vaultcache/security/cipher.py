"""
vaultcache — Value Cipher

Authenticated symmetric encryption for cached values. The Fernet key is
derived from the configured salt with HKDF-SHA256, so any non-empty salt
string is usable and two different salts never decrypt each other's tokens.
"""

import base64
import logging

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..errors import CryptoError

logger = logging.getLogger(__name__)

_KDF_INFO = b"vaultcache.value-encryption.v1"


def derive_key(salt: str) -> bytes:
    """Derive a urlsafe base64 Fernet key from a salt string."""
    if not salt:
        raise CryptoError("Cannot derive an encryption key from an empty salt")

    hkdf = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=_KDF_INFO)
    return base64.urlsafe_b64encode(hkdf.derive(salt.encode("utf-8")))


class ValueCipher:
    """
    Encrypts and decrypts cache payloads.

    Tokens are ASCII strings so they can be stored by any backend.
    Decrypted payloads are returned as text.
    """

    def __init__(self, salt: str):
        self._fernet = Fernet(derive_key(salt))

    def encrypt(self, plaintext: str | bytes) -> str:
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        elif not isinstance(plaintext, bytes):
            raise CryptoError(
                f"Only text can be encrypted, got {type(plaintext).__name__}; enable serialization",
                details={"value_type": type(plaintext).__name__},
            )
        return self._fernet.encrypt(plaintext).decode("ascii")

    def decrypt(self, token: str | bytes) -> str:
        if isinstance(token, str):
            token = token.encode("ascii", errors="replace")
        elif not isinstance(token, bytes):
            raise CryptoError(
                f"Stored value is not an encrypted token ({type(token).__name__})",
                details={"value_type": type(token).__name__},
            )

        try:
            plaintext = self._fernet.decrypt(token)
        except InvalidToken as e:
            logger.warning("Rejected ciphertext: wrong key or modified token")
            raise CryptoError("Wrong key or modified ciphertext") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CryptoError("Decrypted payload is not valid UTF-8 text") from e
