"""
apps.routing.crypto
===================

Reversible obfuscation of site paths for ``/e/<token>`` links.

Tokens use the OpenSSL "Salted__" passphrase format (the same one
``CryptoJS.AES.encrypt(text, passphrase)`` produces): an 8-byte random salt,
key and IV derived with ``EVP_BytesToKey`` (MD5, one round), AES-256-CBC
with PKCS#7 padding, then base64. The base64 is made URL-safe by mapping
``+`` to ``-`` and ``/`` to ``_`` and dropping ``=`` padding.

Links already published under ``/e/`` depend on the exact format and on the
passphrase; changing either breaks them.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import os
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from django.conf import settings

from apps.core.results import Result

logger = logging.getLogger(__name__)

ENCRYPTED_PREFIX = "/e/"
SALT_HEADER = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32
IV_SIZE = 16


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def evp_bytes_to_key(passphrase: bytes, salt: bytes) -> tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single iteration."""
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE:KEY_SIZE + IV_SIZE]


def to_urlsafe(token: str) -> str:
    return token.replace("+", "-").replace("/", "_").replace("=", "")


def from_urlsafe(token: str) -> str:
    standard = token.replace("-", "+").replace("_", "/")
    return standard + "=" * (-len(standard) % 4)


class PathCipher:
    """Encrypts and decrypts path strings with a fixed passphrase."""

    def __init__(self, passphrase: str) -> None:
        if not passphrase:
            raise ValueError("PathCipher needs a non-empty passphrase")
        self._passphrase = passphrase.encode("utf-8")

    def encrypt(self, text: str, *, salt: Optional[bytes] = None) -> str:
        salt = salt if salt is not None else os.urandom(SALT_SIZE)
        if len(salt) != SALT_SIZE:
            raise ValueError("salt must be 8 bytes")
        key, iv = evp_bytes_to_key(self._passphrase, salt)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(text.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        raw = SALT_HEADER + salt + ciphertext
        return to_urlsafe(base64.b64encode(raw).decode("ascii"))

    def decrypt(self, token: str) -> Result[str]:
        """Decrypt a URL-safe token; every malformed input is a failure."""
        if not token:
            return Result.failure("empty token")
        try:
            raw = base64.b64decode(from_urlsafe(token), validate=True)
        except (binascii.Error, ValueError):
            return Result.failure("token is not base64")

        if not raw.startswith(SALT_HEADER) or len(raw) < len(SALT_HEADER) + SALT_SIZE + 16:
            return Result.failure("token has no salted header")
        body = raw[len(SALT_HEADER):]
        salt, ciphertext = body[:SALT_SIZE], body[SALT_SIZE:]
        if len(ciphertext) % 16:
            return Result.failure("ciphertext is not block aligned")

        key, iv = evp_bytes_to_key(self._passphrase, salt)
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        try:
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plain = unpadder.update(padded) + unpadder.finalize()
            text = plain.decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            return Result.failure("token does not decrypt with this key")

        if not text:
            return Result.failure("token decrypts to an empty path")
        return Result.success(text)


# ---------------------------------------------------------------------------
# Site-level helpers
# ---------------------------------------------------------------------------


def get_cipher() -> PathCipher:
    return PathCipher(settings.URL_ENCRYPTION_KEY)


def encrypt_path(path: str) -> str:
    return get_cipher().encrypt(path)


def decrypt_path(token: str) -> Result[str]:
    return get_cipher().decrypt(token)


def encrypted_route(path: Optional[str]) -> str:
    """
    ``/e/<token>`` link for ``path``.

    Already-encrypted routes are returned unchanged; an empty path maps to
    the home page.
    """
    if not path or not isinstance(path, str):
        return "/"
    if path.startswith(ENCRYPTED_PREFIX):
        return path
    return ENCRYPTED_PREFIX + encrypt_path(path)


def original_path(route: str) -> Result[str]:
    """
    Canonical path behind a route.

    Routes without the ``/e/`` prefix are already canonical. Decrypted
    paths always get a leading slash.
    """
    if not route.startswith(ENCRYPTED_PREFIX):
        return Result.success(route)

    result = decrypt_path(route[len(ENCRYPTED_PREFIX):])
    if not result.ok:
        logger.debug("original_path: %s", result.error)
        return result
    return result.map(lambda path: path if path.startswith("/") else "/" + path)
