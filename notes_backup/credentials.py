"""
Stored SMTP Credentials
=======================

Credential files hold the SMTP login encrypted with Fernet symmetric
encryption. The key is derived from a passphrase with PBKDF2; a random salt
is stored on the first line of the file and the Fernet token on the second.
"""

import base64
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .error_handling import CredentialNotFound

logger = logging.getLogger(__name__)

KDF_ITERATIONS = 390000
SALT_SIZE = 16


@dataclass(frozen=True)
class Credential:
    """SMTP login."""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credential(username={self.username!r}, password='***')"


class CredentialStore:
    """Loads and saves passphrase-protected credential files."""

    def __init__(self, passphrase: str):
        self.passphrase = passphrase

    def _derive_key(self, salt: bytes) -> bytes:
        """Derive encryption key from passphrase."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=KDF_ITERATIONS,
        )
        return base64.urlsafe_b64encode(kdf.derive(self.passphrase.encode()))

    def save_credential(self, path: Union[str, Path], credential: Credential) -> None:
        path = Path(path)
        salt = os.urandom(SALT_SIZE)
        payload = json.dumps({"username": credential.username, "password": credential.password})
        token = Fernet(self._derive_key(salt)).encrypt(payload.encode("utf-8"))

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(base64.urlsafe_b64encode(salt) + b"\n" + token + b"\n")
        logger.info(f"Saved credential for {credential.username} to {path}")

    def load_credential(self, path: Union[str, Path]) -> Credential:
        path = Path(path)
        if not path.is_file():
            raise CredentialNotFound(f"Credential file not found: {path}")

        try:
            with open(path, "rb") as f:
                salt_line, token = f.read().split(b"\n")[:2]
            salt = base64.urlsafe_b64decode(salt_line)
            data = json.loads(Fernet(self._derive_key(salt)).decrypt(token.strip()))
            return Credential(username=data["username"], password=data["password"])
        except OSError as e:
            raise CredentialNotFound(f"Cannot read credential file {path}: {e}") from e
        except InvalidToken as e:
            raise CredentialNotFound(f"Cannot decrypt credential file {path}: wrong passphrase or corrupt file") from e
        except (ValueError, KeyError, TypeError) as e:
            raise CredentialNotFound(f"Credential file {path} is malformed: {e}") from e
