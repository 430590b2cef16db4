"""Claims carried by a verified session token."""

from pydantic import BaseModel, ConfigDict

from sarvatra.schemas.account import AccountStatus, Role


class TokenPayload(BaseModel):
    """
    Identity, role and approval state embedded in a session token.

    Role and status are a snapshot taken at issuance; changes made afterwards
    apply only once the client logs in again or the token expires.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    username: str
    role: Role
    status: AccountStatus
    iat: int | None = None
    exp: int
