"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sarvatra.core.errors import ConfigurationError

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
)

# Symmetric MAC algorithms only; asymmetric or "none" are never accepted.
ALLOWED_JWT_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})

# Minimum length in bytes for the token signing secret and the credential master secret.
MIN_SECRET_BYTES = 32


def _check_secret_length(name: str, v: SecretStr) -> SecretStr:
    raw = v.get_secret_value()
    if not raw or not raw.strip():
        raise ValueError(f"{name} must be set and non-empty")
    if len(raw.encode("utf-8")) < MIN_SECRET_BYTES:
        raise ValueError(f"{name} must be at least {MIN_SECRET_BYTES} bytes long")
    return v


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    API_V1_PREFIX: str = "/api/v1"
    # Comma-separated; empty means no cross-origin access.
    CORS_ORIGINS: str = ""

    # Persistence: "memory" keeps everything in process (tests, demos); "sql" uses DATABASE_URL.
    STORE_BACKEND: Literal["sql", "memory"] = "sql"
    DATABASE_URL: str = "sqlite:///./sarvatra.db"

    # Session tokens. No defaults for secrets: the process must not start without them.
    JWT_SECRET: SecretStr
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 24 * 60
    JWT_ISSUER: str = "sarvatra-ai"
    JWT_AUDIENCE: str = "sarvatra-ai-users"

    # Key material for encrypting users' third-party API keys at rest.
    CREDENTIAL_MASTER_SECRET: SecretStr

    # Bcrypt cost (rounds); 12 is a good default for security vs speed.
    BCRYPT_ROUNDS: int = 12

    # AI provider (OpenAI-compatible HTTP API); each user supplies their own key.
    PROVIDER_BASE_URL: str = "https://api.openai.com/v1"
    PROVIDER_CHAT_MODEL: str = "gpt-3.5-turbo"
    PROVIDER_TRANSCRIPTION_MODEL: str = "whisper-1"
    PROVIDER_MAX_TOKENS: int = 2000
    PROVIDER_REQUEST_TIMEOUT_SEC: float = 60.0
    # Check a submitted API key against the provider before storing it.
    VERIFY_API_KEY_ON_SAVE: bool = True

    # First-start provisioning (optional).
    BOOTSTRAP_ADMIN_USERNAME: str | None = None
    BOOTSTRAP_ADMIN_PASSWORD: SecretStr | None = None
    SEED_DEFAULT_COMMANDS: bool = True

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite URL (e.g. postgresql:// or sqlite:///)"
            )
        return v.strip()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        return _check_secret_length("JWT_SECRET", v)

    @field_validator("CREDENTIAL_MASTER_SECRET")
    @classmethod
    def validate_master_secret(cls, v: SecretStr) -> SecretStr:
        return _check_secret_length("CREDENTIAL_MASTER_SECRET", v)

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        algorithm = (v or "").strip().upper()
        if algorithm not in ALLOWED_JWT_ALGORITHMS:
            raise ValueError(
                f"JWT_ALGORITHM must be one of {sorted(ALLOWED_JWT_ALGORITHMS)}"
            )
        return algorithm

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 10080 (1 min to 7 days)"
            )
        return v

    @field_validator("JWT_ISSUER", "JWT_AUDIENCE")
    @classmethod
    def validate_token_tags(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ISSUER and JWT_AUDIENCE must be non-empty")
        return v.strip()

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 16:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 16")
        return v

    @field_validator("PROVIDER_BASE_URL")
    @classmethod
    def validate_provider_base_url(cls, v: str) -> str:
        s = (v or "").strip().lower()
        if not (s.startswith("http://") or s.startswith("https://")):
            raise ValueError(
                "PROVIDER_BASE_URL must use http or https (e.g. https://api.openai.com/v1)"
            )
        return v.strip().rstrip("/")

    @field_validator("PROVIDER_REQUEST_TIMEOUT_SEC")
    @classmethod
    def validate_provider_timeout(cls, v: float) -> float:
        if v <= 0 or v > 300:
            raise ValueError(
                "PROVIDER_REQUEST_TIMEOUT_SEC must be greater than 0 and at most 300"
            )
        return v

    @field_validator("PROVIDER_MAX_TOKENS")
    @classmethod
    def validate_provider_max_tokens(cls, v: int) -> int:
        if v < 1 or v > 32000:
            raise ValueError("PROVIDER_MAX_TOKENS must be between 1 and 32000")
        return v

    @model_validator(mode="after")
    def validate_independent_secrets(self) -> "Settings":
        if (
            self.JWT_SECRET.get_secret_value()
            == self.CREDENTIAL_MASTER_SECRET.get_secret_value()
        ):
            raise ValueError(
                "CREDENTIAL_MASTER_SECRET must differ from JWT_SECRET"
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


def load_settings(**overrides: object) -> Settings:
    """Build settings, turning validation failures into ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return load_settings()


settings = get_settings()
