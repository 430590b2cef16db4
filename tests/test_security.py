"""Unit tests for password hashing, session tokens and settings validation."""

import base64
import json
import unittest
from datetime import UTC, datetime, timedelta

import jwt

from sarvatra.core.config import load_settings
from sarvatra.core.errors import ConfigurationError
from sarvatra.core.security import (
    create_access_token,
    hash_password,
    verify_access_token,
    verify_password,
)
from sarvatra.schemas.account import AccountRecord


def _account(**kwargs: object) -> AccountRecord:
    defaults: dict[str, object] = {
        "id": "acc-1",
        "username": "alice",
        "password_hash": "unused",
        "role": "user",
        "status": "approved",
        "created_at": datetime.now(UTC),
    }
    defaults.update(kwargs)
    return AccountRecord(**defaults)


class TestPasswordHashing(unittest.TestCase):
    def test_verify_matches_original(self) -> None:
        hashed = hash_password("Corr3ct!Horse", rounds=4)
        self.assertTrue(verify_password("Corr3ct!Horse", hashed))
        self.assertFalse(verify_password("Corr3ct!Horse2", hashed))

    def test_hash_is_salted(self) -> None:
        self.assertNotEqual(hash_password("Same!Pass1", rounds=4), hash_password("Same!Pass1", rounds=4))

    def test_empty_password(self) -> None:
        hashed = hash_password("", rounds=4)
        self.assertTrue(verify_password("", hashed))
        self.assertFalse(verify_password(" ", hashed))

    def test_trailing_whitespace_is_significant(self) -> None:
        hashed = hash_password("Passw0rd!", rounds=4)
        self.assertFalse(verify_password("Passw0rd! ", hashed))

    def test_malformed_hash_is_mismatch(self) -> None:
        for bad in ("", "not-a-bcrypt-hash", "$2b$04$short"):
            with self.subTest(hash=bad):
                self.assertFalse(verify_password("whatever", bad))

    def test_over_72_bytes(self) -> None:
        long_password = "A1!" + "x" * 70
        with self.assertRaises(ValueError):
            hash_password(long_password, rounds=4)
        hashed = hash_password(long_password[:72], rounds=4)
        self.assertFalse(verify_password(long_password, hashed))

    def test_default_cost_comes_from_settings(self) -> None:
        self.assertTrue(hash_password("Cost!Check1").startswith("$2b$04$"))


class TestSessionTokens(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = load_settings()

    def test_round_trip(self) -> None:
        account = _account(role="admin")
        payload = verify_access_token(create_access_token(account, self.settings), self.settings)
        self.assertIsNotNone(payload)
        assert payload is not None
        self.assertEqual(payload.id, account.id)
        self.assertEqual(payload.username, "alice")
        self.assertEqual(payload.role, "admin")
        self.assertEqual(payload.status, "approved")
        self.assertGreater(payload.exp, payload.iat or 0)

    def test_issuance_not_gated_on_status(self) -> None:
        token = create_access_token(_account(status="pending"), self.settings)
        payload = verify_access_token(token, self.settings)
        assert payload is not None
        self.assertEqual(payload.status, "pending")

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(
            _account(), self.settings, expires_delta=timedelta(seconds=-10)
        )
        self.assertIsNone(verify_access_token(token, self.settings))

    def test_wrong_secret_rejected(self) -> None:
        other = load_settings(JWT_SECRET="another-signing-secret-" + "z" * 20)
        token = create_access_token(_account(), other)
        self.assertIsNone(verify_access_token(token, self.settings))

    def test_wrong_issuer_or_audience_rejected(self) -> None:
        for overrides in ({"JWT_ISSUER": "someone-else"}, {"JWT_AUDIENCE": "other-users"}):
            with self.subTest(**overrides):
                token = create_access_token(_account(), load_settings(**overrides))
                self.assertIsNone(verify_access_token(token, self.settings))

    def test_other_algorithm_rejected(self) -> None:
        now = datetime.now(UTC)
        claims = {
            "sub": "acc-1",
            "id": "acc-1",
            "username": "alice",
            "role": "admin",
            "status": "approved",
            "iss": self.settings.JWT_ISSUER,
            "aud": self.settings.JWT_AUDIENCE,
            "iat": now,
            "exp": now + timedelta(minutes=5),
        }
        token = jwt.encode(
            claims, self.settings.JWT_SECRET.get_secret_value(), algorithm="HS512"
        )
        self.assertIsNone(verify_access_token(token, self.settings))

    def test_missing_required_claim_rejected(self) -> None:
        now = datetime.now(UTC)
        claims = {
            "sub": "acc-1",
            "id": "acc-1",
            "username": "alice",
            "role": "user",
            "status": "approved",
            "iss": self.settings.JWT_ISSUER,
            "aud": self.settings.JWT_AUDIENCE,
            "exp": now + timedelta(minutes=5),
        }
        token = jwt.encode(
            claims, self.settings.JWT_SECRET.get_secret_value(), algorithm="HS256"
        )
        self.assertIsNone(verify_access_token(token, self.settings))

    def test_forged_payload_rejected(self) -> None:
        token = create_access_token(_account(role="user"), self.settings)
        header, payload_b64, signature = token.split(".")
        padded = payload_b64 + "=" * (-len(payload_b64) % 4)
        claims = json.loads(base64.urlsafe_b64decode(padded))
        claims["role"] = "admin"
        forged_payload = (
            base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()
        )
        forged = ".".join((header, forged_payload, signature))
        self.assertIsNone(verify_access_token(forged, self.settings))

    def test_garbage_rejected(self) -> None:
        for token in ("", "abc", "a.b.c"):
            with self.subTest(token=token):
                self.assertIsNone(verify_access_token(token, self.settings))


class TestSettingsValidation(unittest.TestCase):
    def test_short_jwt_secret(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_settings(JWT_SECRET="short")

    def test_short_master_secret(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_settings(CREDENTIAL_MASTER_SECRET="short")

    def test_secrets_must_differ(self) -> None:
        shared = "s" * 40
        with self.assertRaises(ConfigurationError):
            load_settings(JWT_SECRET=shared, CREDENTIAL_MASTER_SECRET=shared)

    def test_only_hmac_algorithms(self) -> None:
        for algorithm in ("none", "RS256", "ES256"):
            with self.subTest(algorithm=algorithm):
                with self.assertRaises(ConfigurationError):
                    load_settings(JWT_ALGORITHM=algorithm)
        self.assertEqual(load_settings(JWT_ALGORITHM="hs512").JWT_ALGORITHM, "HS512")

    def test_defaults(self) -> None:
        settings = load_settings()
        self.assertEqual(settings.JWT_ISSUER, "sarvatra-ai")
        self.assertEqual(settings.JWT_AUDIENCE, "sarvatra-ai-users")
        self.assertEqual(settings.JWT_EXPIRE_MINUTES, 1440)
        self.assertEqual(settings.API_V1_PREFIX, "/api/v1")


if __name__ == "__main__":
    unittest.main()
