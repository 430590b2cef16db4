"""Unit tests for sarvatra.core.crypto: API key encryption at rest."""

import unittest

from sarvatra.core.crypto import (
    BLOB_SEPARATOR,
    BlobAuthenticationError,
    CredentialCipher,
    CredentialCorruptedError,
    MalformedBlobError,
    decrypt_credential,
    encrypt_credential,
)
from sarvatra.core.errors import ConfigurationError

MASTER_SECRET = "m" * 40
OTHER_SECRET = "o" * 40

# Low scrypt cost keeps per-blob tests fast; format and checks are unchanged.
FAST_N = 2**4


def _cipher(secret: str = MASTER_SECRET) -> CredentialCipher:
    return CredentialCipher(secret, scrypt_n=FAST_N)


class TestRoundTrip(unittest.TestCase):
    def test_decrypt_returns_plaintext(self) -> None:
        cipher = _cipher()
        for key in ("sk-test-1234567890", "", "ключ-🔑", "x" * 500):
            with self.subTest(key=key[:20]):
                self.assertEqual(cipher.decrypt(cipher.encrypt(key)), key)

    def test_module_functions_use_default_cost(self) -> None:
        blob = encrypt_credential("sk-abc", MASTER_SECRET)
        self.assertEqual(decrypt_credential(blob, MASTER_SECRET), "sk-abc")

    def test_same_plaintext_gives_different_blobs(self) -> None:
        cipher = _cipher()
        self.assertNotEqual(cipher.encrypt("sk-same"), cipher.encrypt("sk-same"))

    def test_blob_shape(self) -> None:
        plaintext = "sk-shape-check"
        parts = _cipher().encrypt(plaintext).split(BLOB_SEPARATOR)
        self.assertEqual(len(parts), 4)
        salt, nonce, ciphertext, tag = parts
        self.assertEqual(len(salt), 64)
        self.assertEqual(len(nonce), 24)
        self.assertEqual(len(ciphertext), 2 * len(plaintext.encode("utf-8")))
        self.assertEqual(len(tag), 32)
        for part in parts:
            self.assertEqual(part, part.lower())
            bytes.fromhex(part)


class TestRejection(unittest.TestCase):
    def test_wrong_master_secret_fails_authentication(self) -> None:
        blob = _cipher().encrypt("sk-secret")
        with self.assertRaises(BlobAuthenticationError):
            _cipher(OTHER_SECRET).decrypt(blob)

    def test_every_single_bit_flip_is_rejected(self) -> None:
        cipher = _cipher()
        blob = cipher.encrypt("sk-flip")
        raw = blob.encode("latin-1")
        for index in range(len(raw)):
            for bit in range(8):
                flipped = bytearray(raw)
                flipped[index] ^= 1 << bit
                tampered = flipped.decode("latin-1")
                with self.subTest(index=index, bit=bit):
                    with self.assertRaises(CredentialCorruptedError):
                        cipher.decrypt(tampered)

    def test_malformed_blobs(self) -> None:
        cipher = _cipher()
        salt, nonce, ciphertext, tag = cipher.encrypt("sk-x").split(BLOB_SEPARATOR)
        cases = {
            "empty": "",
            "no separators": "abcdef",
            "three parts": BLOB_SEPARATOR.join((salt, nonce, ciphertext)),
            "five parts": BLOB_SEPARATOR.join((salt, nonce, ciphertext, tag, "00")),
            "uppercase hex": BLOB_SEPARATOR.join((salt.upper(), nonce, ciphertext, tag)),
            "odd length": BLOB_SEPARATOR.join((salt, nonce, ciphertext + "0", tag)),
            "short salt": BLOB_SEPARATOR.join((salt[:-2], nonce, ciphertext, tag)),
            "short nonce": BLOB_SEPARATOR.join((salt, nonce[:-2], ciphertext, tag)),
            "short tag": BLOB_SEPARATOR.join((salt, nonce, ciphertext, tag[:-2])),
            "not hex": BLOB_SEPARATOR.join((salt, nonce, "zz", tag)),
        }
        for name, blob in cases.items():
            with self.subTest(case=name):
                with self.assertRaises(MalformedBlobError):
                    cipher.decrypt(blob)

    def test_errors_share_corrupted_base(self) -> None:
        self.assertTrue(issubclass(MalformedBlobError, CredentialCorruptedError))
        self.assertTrue(issubclass(BlobAuthenticationError, CredentialCorruptedError))


class TestMasterSecret(unittest.TestCase):
    def test_short_secret_is_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            CredentialCipher("too-short")

    def test_bytes_secret_accepted(self) -> None:
        cipher = CredentialCipher(b"b" * 32, scrypt_n=FAST_N)
        self.assertEqual(cipher.decrypt(cipher.encrypt("sk-b")), "sk-b")


if __name__ == "__main__":
    unittest.main()
