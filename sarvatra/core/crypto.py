"""
Authenticated encryption of users' third-party API keys at rest.

Blob format: salt:nonce:ciphertext:tag, each component lowercase hex.
A fresh 32-byte salt derives a per-record AES-256 key from the master secret
with scrypt; AES-GCM with a fresh 12-byte nonce provides confidentiality and a
16-byte authentication tag.
"""

import os
import re

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from sarvatra.core.errors import ConfigurationError, SarvatraError

SALT_BYTES = 32
NONCE_BYTES = 12
TAG_BYTES = 16
KEY_BYTES = 32
MIN_MASTER_SECRET_BYTES = 32

# scrypt cost parameters (n=2^14, r=8, p=1: ~16 MiB per derivation).
SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1

BLOB_SEPARATOR = ":"
BLOB_PARTS = 4

# Canonical encoding only: uppercase hex would decode to the same bytes.
_HEX_RE = re.compile(r"[0-9a-f]*")


class CredentialCorruptedError(SarvatraError):
    """Stored credential cannot be used; the user must re-enter it."""


class MalformedBlobError(CredentialCorruptedError):
    """Blob does not have the salt:nonce:ciphertext:tag shape."""


class BlobAuthenticationError(CredentialCorruptedError):
    """Authentication tag check failed: tampered blob or wrong master secret."""


def _secret_bytes(master_secret: str | bytes) -> bytes:
    raw = master_secret.encode("utf-8") if isinstance(master_secret, str) else master_secret
    if len(raw) < MIN_MASTER_SECRET_BYTES:
        raise ConfigurationError(
            f"Credential master secret must be at least {MIN_MASTER_SECRET_BYTES} bytes long"
        )
    return raw


def _decode_part(name: str, value: str, expected_len: int | None) -> bytes:
    if _HEX_RE.fullmatch(value) is None or len(value) % 2:
        raise MalformedBlobError(f"Credential blob {name} is not lowercase hex.")
    data = bytes.fromhex(value)
    if expected_len is not None and len(data) != expected_len:
        raise MalformedBlobError(
            f"Credential blob {name} must be {expected_len} bytes, got {len(data)}."
        )
    return data


class CredentialCipher:
    """Encrypts and decrypts API keys under a process-wide master secret."""

    def __init__(self, master_secret: str | bytes, *, scrypt_n: int = SCRYPT_N) -> None:
        self._secret = _secret_bytes(master_secret)
        self._scrypt_n = scrypt_n

    def _derive_key(self, salt: bytes) -> bytes:
        kdf = Scrypt(salt=salt, length=KEY_BYTES, n=self._scrypt_n, r=SCRYPT_R, p=SCRYPT_P)
        return kdf.derive(self._secret)

    def encrypt(self, plaintext: str) -> str:
        salt = os.urandom(SALT_BYTES)
        nonce = os.urandom(NONCE_BYTES)
        sealed = AESGCM(self._derive_key(salt)).encrypt(
            nonce, plaintext.encode("utf-8"), None
        )
        ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
        return BLOB_SEPARATOR.join(
            (salt.hex(), nonce.hex(), ciphertext.hex(), tag.hex())
        )

    def decrypt(self, blob: str) -> str:
        """
        Return the plaintext key, or raise MalformedBlobError / BlobAuthenticationError.
        Nothing is returned unless the tag verifies.
        """
        parts = blob.split(BLOB_SEPARATOR)
        if len(parts) != BLOB_PARTS:
            raise MalformedBlobError(
                f"Credential blob must have {BLOB_PARTS} parts, got {len(parts)}."
            )
        salt_hex, nonce_hex, ciphertext_hex, tag_hex = parts
        salt = _decode_part("salt", salt_hex, SALT_BYTES)
        nonce = _decode_part("nonce", nonce_hex, NONCE_BYTES)
        ciphertext = _decode_part("ciphertext", ciphertext_hex, None)
        tag = _decode_part("tag", tag_hex, TAG_BYTES)

        try:
            plaintext = AESGCM(self._derive_key(salt)).decrypt(
                nonce, ciphertext + tag, None
            )
        except InvalidTag as e:
            raise BlobAuthenticationError(
                "Credential blob failed authentication (tampered or wrong secret)."
            ) from e
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedBlobError("Credential plaintext is not valid UTF-8.") from e


def encrypt_credential(plaintext: str, master_secret: str | bytes) -> str:
    return CredentialCipher(master_secret).encrypt(plaintext)


def decrypt_credential(blob: str, master_secret: str | bytes) -> str:
    return CredentialCipher(master_secret).decrypt(blob)
