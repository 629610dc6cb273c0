# nextra/config.py
# Environment-aware configuration for the Nextra backend

import os
from typing import Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# JWT configuration
SECRET_KEY = os.environ.get("SECRET_KEY", "nextra-dev-secret-key-change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_MINUTES = int(os.environ.get("ACCESS_TOKEN_MINUTES", "60"))

# Password hashing (PBKDF2-SHA256)
PASSWORD_HASH_ITERATIONS = int(os.environ.get("PASSWORD_HASH_ITERATIONS", "260000"))

# Database configuration
# DATABASE_URL takes precedence (managed Postgres); falls back to a SQLite file
DATABASE_URL = os.environ.get("DATABASE_URL", "").strip()
DATABASE_PATH = os.environ.get("DATABASE_PATH", "nextra.db")

IS_POSTGRES = DATABASE_URL.startswith(("postgres://", "postgresql://"))
IS_SQLITE = not IS_POSTGRES

# CORS origins (expand for staging/prod)
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if IS_STAGING or IS_PROD:
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        CORS_ORIGINS.extend(origin.strip() for origin in extra_origins.split(",") if origin.strip())

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG" if IS_DEV else "INFO").upper()

# File storage
STORAGE_PROVIDER = os.environ.get("STORAGE_PROVIDER", "local").strip().lower()
STORAGE_LOCAL_BASE_PATH = os.environ.get("STORAGE_LOCAL_BASE_PATH", "./uploads")
STORAGE_LOCAL_BASE_URL = os.environ.get("STORAGE_LOCAL_BASE_URL", "http://localhost:8000").rstrip("/")

# Bootstrap admin (seeded at startup when both are set; dev gets a default)
ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin" if IS_DEV else "").strip()
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "password" if IS_DEV else "")
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@nextra.local").strip()

# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Property images
MAX_IMAGES_PER_PROPERTY = 10
MAX_IMAGE_BYTES = 10 * 1024 * 1024
