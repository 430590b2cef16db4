"""Unit tests for sarvatra.services.authorization: the approval gate and role-or-self policy."""

import unittest
from datetime import UTC, datetime

from sarvatra.core.config import load_settings
from sarvatra.core.errors import (
    AccountNotApprovedError,
    AuthenticationFailedError,
    AuthorizationDeniedError,
)
from sarvatra.core.security import create_access_token
from sarvatra.schemas.account import AccountRecord
from sarvatra.schemas.token import TokenPayload
from sarvatra.services.authorization import (
    authenticate_token,
    evaluate_access,
    require_admin,
    require_admin_or_self,
)


def _account(account_id: str = "u-1", role: str = "user", status: str = "approved") -> AccountRecord:
    return AccountRecord(
        id=account_id,
        username=f"name-{account_id}",
        password_hash="unused",
        role=role,
        status=status,
        created_at=datetime.now(UTC),
    )


def _payload(account_id: str = "u-1", role: str = "user") -> TokenPayload:
    return TokenPayload(id=account_id, username="x", role=role, status="approved", exp=0)


class TestAuthenticateToken(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = load_settings()

    def test_no_token(self) -> None:
        for token in (None, ""):
            with self.subTest(token=token):
                with self.assertRaises(AuthenticationFailedError) as ctx:
                    authenticate_token(token, self.settings)
                self.assertEqual(ctx.exception.reason, "no_token")

    def test_invalid_token(self) -> None:
        with self.assertRaises(AuthenticationFailedError) as ctx:
            authenticate_token("not.a.token", self.settings)
        self.assertEqual(ctx.exception.reason, "invalid_token")

    def test_unapproved_status_rejected_even_with_valid_signature(self) -> None:
        for status in ("pending", "rejected"):
            with self.subTest(status=status):
                token = create_access_token(_account(status=status), self.settings)
                with self.assertRaises(AccountNotApprovedError) as ctx:
                    authenticate_token(token, self.settings)
                self.assertEqual(ctx.exception.status, status)

    def test_approved_token_admitted(self) -> None:
        token = create_access_token(_account(role="admin"), self.settings)
        payload = authenticate_token(token, self.settings)
        self.assertEqual(payload.id, "u-1")
        self.assertEqual(payload.role, "admin")


class TestRoleOrSelf(unittest.TestCase):
    def test_self_access_allowed(self) -> None:
        decision = require_admin_or_self(_payload("u-1"), "u-1")
        self.assertTrue(decision.is_self)
        self.assertFalse(decision.is_admin)

    def test_admin_allowed_for_anyone(self) -> None:
        decision = require_admin_or_self(_payload("a-1", role="admin"), "u-2")
        self.assertTrue(decision.is_admin)
        self.assertFalse(decision.is_self)

    def test_other_user_denied_with_role(self) -> None:
        with self.assertRaises(AuthorizationDeniedError) as ctx:
            require_admin_or_self(_payload("u-1"), "u-2")
        self.assertEqual(ctx.exception.role, "user")

    def test_require_admin_without_owner(self) -> None:
        with self.assertRaises(AuthorizationDeniedError) as ctx:
            require_admin(_payload("u-1"))
        self.assertIn("Admin privileges required", ctx.exception.message)
        self.assertTrue(require_admin(_payload("a-1", role="admin")).is_admin)

    def test_evaluate_access_without_owner_is_never_self(self) -> None:
        self.assertFalse(evaluate_access(_payload("u-1")).is_self)


if __name__ == "__main__":
    unittest.main()
