"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sarvatra.api.v1 import router as v1_router
from sarvatra.core.config import Settings, settings
from sarvatra.core.crypto import CredentialCipher
from sarvatra.services.accounts import ensure_bootstrap_admin
from sarvatra.services.commands import seed_default_commands
from sarvatra.stores import SqlStore, Store, build_store

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    store: Store | None = None,
    cipher: CredentialCipher | None = None,
) -> FastAPI:
    """
    Build the application around one store and one credential cipher.

    Tests pass their own settings and a MemoryStore; the default uses the
    process settings and STORE_BACKEND.
    """
    app_settings = app_settings or settings
    if store is None:
        store = build_store(app_settings)
        if isinstance(store, SqlStore) and app_settings.DATABASE_URL.startswith("sqlite"):
            store.create_schema()
    if cipher is None:
        cipher = CredentialCipher(app_settings.CREDENTIAL_MASTER_SECRET.get_secret_value())

    ensure_bootstrap_admin(store, app_settings)
    if app_settings.SEED_DEFAULT_COMMANDS:
        seeded = seed_default_commands(store)
        if seeded:
            logger.info("Seeded default commands", extra={"count": seeded})

    app = FastAPI(
        title="Sarvatra API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = app_settings
    app.state.store = store
    app.state.cipher = cipher

    origins = app_settings.cors_origins
    if not origins and app_settings.APP_ENV == "dev":
        origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix=app_settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Sarvatra API"}

    logger.info(
        "Application ready",
        extra={"store_backend": store.backend, "environment": app_settings.APP_ENV},
    )
    return app


app = create_app()
