"""Translate domain and provider errors into HTTPException with minimal detail."""

from fastapi import HTTPException, status

from sarvatra.core.crypto import CredentialCorruptedError
from sarvatra.core.errors import (
    AccountNotApprovedError,
    AccountNotFoundError,
    CommandNotFoundError,
    CommandUnavailableError,
    CredentialMissingError,
    InvalidCredentialsError,
    SarvatraError,
    UsernameTakenError,
)
from sarvatra.services.provider import ProviderError

CORRUPTED_CREDENTIAL_DETAIL = (
    "Stored API key could not be read. Please re-enter your key in Settings."
)

_STATUS_BY_ERROR: tuple[tuple[type[SarvatraError], int], ...] = (
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (CommandUnavailableError, status.HTTP_403_FORBIDDEN),
    (AccountNotFoundError, status.HTTP_404_NOT_FOUND),
    (CommandNotFoundError, status.HTTP_404_NOT_FOUND),
    (UsernameTakenError, status.HTTP_409_CONFLICT),
    (CredentialMissingError, status.HTTP_400_BAD_REQUEST),
)

_STATUS_BY_PROVIDER_KIND = {
    "invalid_key": status.HTTP_400_BAD_REQUEST,
    "quota": status.HTTP_400_BAD_REQUEST,
    "unreachable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "timeout": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(e: SarvatraError) -> HTTPException:
    if isinstance(e, AccountNotApprovedError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Account is not approved.", "status": e.status},
        )
    if isinstance(e, CredentialCorruptedError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=CORRUPTED_CREDENTIAL_DETAIL
        )
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            return HTTPException(status_code=status_code, detail=e.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error."
    )


def provider_http_exception(e: ProviderError) -> HTTPException:
    status_code = _STATUS_BY_PROVIDER_KIND.get(e.kind, status.HTTP_502_BAD_GATEWAY)
    return HTTPException(status_code=status_code, detail=e.message)
