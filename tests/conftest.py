"""Test environment: secrets and a cheap bcrypt cost must be set before sarvatra is imported."""

import os

os.environ.setdefault("JWT_SECRET", "test-jwt-secret-0123456789abcdef0123456789")
os.environ.setdefault(
    "CREDENTIAL_MASTER_SECRET", "test-master-secret-fedcba9876543210fedcba98"
)
os.environ["APP_ENV"] = "dev"
os.environ["STORE_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["VERIFY_API_KEY_ON_SAVE"] = "false"
os.environ.pop("BOOTSTRAP_ADMIN_USERNAME", None)
os.environ.pop("BOOTSTRAP_ADMIN_PASSWORD", None)
