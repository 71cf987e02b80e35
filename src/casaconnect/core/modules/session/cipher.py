"""Encryption of session data at rest.

The Fernet key is derived from the session secret, so rotating the secret
invalidates both the cookie signatures and every stored session.
"""

import base64
import json
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

KDF_SALT = b"casaconnect-session-store"
KDF_ITERATIONS = 100_000


class SessionDecryptError(Exception):
    """Raised when stored session data cannot be decrypted with the current secret."""


class SessionCipher:
    def __init__(self, secret: str) -> None:
        kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=KDF_SALT, iterations=KDF_ITERATIONS)
        self._fernet = Fernet(base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8"))))

    def encrypt(self, data: dict[str, Any]) -> str:
        return self._fernet.encrypt(json.dumps(data).encode("utf-8")).decode("utf-8")

    def decrypt(self, token: str) -> dict[str, Any]:
        try:
            data = json.loads(self._fernet.decrypt(token.encode("utf-8")))
        except (InvalidToken, ValueError) as e:
            raise SessionDecryptError("Session data cannot be decrypted") from e
        if not isinstance(data, dict):
            raise SessionDecryptError("Session data is not a mapping")
        return data
