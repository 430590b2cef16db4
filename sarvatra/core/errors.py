"""Error taxonomy shared by the auth core, services and HTTP layer."""

from typing import Literal

AuthFailureReason = Literal["no_token", "invalid_token"]


class SarvatraError(Exception):
    """Base class for application errors; carries a client-safe message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(SarvatraError):
    """Raised at startup when required configuration is missing or too weak."""


class AuthenticationFailedError(SarvatraError):
    """Missing, malformed, forged or expired session token."""

    def __init__(self, reason: AuthFailureReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or "Access denied. Authentication required.")


class AuthorizationDeniedError(SarvatraError):
    """Valid identity but insufficient role or ownership."""

    def __init__(self, role: str, message: str | None = None) -> None:
        self.role = role
        super().__init__(
            message or "Access denied. Admin privileges or self-access required."
        )


class AccountNotApprovedError(SarvatraError):
    """Account exists but its approval status does not allow access."""

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__("Account is not approved.")


class InvalidCredentialsError(SarvatraError):
    """Unknown username or wrong password; deliberately indistinguishable."""

    def __init__(self) -> None:
        super().__init__("Invalid username or password.")


class UsernameTakenError(SarvatraError):
    """Raised when creating an account whose username already exists."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__("Username already exists.")


class AccountNotFoundError(SarvatraError):
    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__("User not found.")


class CredentialMissingError(SarvatraError):
    """The account has no stored third-party API key."""

    def __init__(self) -> None:
        super().__init__("API key not configured. Please add your API key in Settings.")


class CommandNotFoundError(SarvatraError):
    def __init__(self, command_id: str) -> None:
        self.command_id = command_id
        super().__init__("Command not found.")


class CommandUnavailableError(SarvatraError):
    """Command exists but is inactive or not published to users."""

    def __init__(self, command_id: str) -> None:
        self.command_id = command_id
        super().__init__("Command is not available to users.")
