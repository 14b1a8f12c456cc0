"""Configuration module for the quiz account service.

This module provides centralized configuration management, including directory
paths, database settings, lockout policy, authentication and API server
settings. All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / DATA_DIR_NAME)))

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/maths_revision_tool.db"
)

# Seconds a connection waits on a locked database before giving up
DB_TIMEOUT_SECONDS: float = float(os.getenv("DB_TIMEOUT_SECONDS", "5"))

# --- Lockout Configuration ---

# Accounts with this many failed logins (or more) are locked until an
# administrator unlocks them.
LOCK_THRESHOLD: int = int(os.getenv("LOCK_THRESHOLD", "3"))

# How many times a strike counter write is attempted before it is reported
STRIKE_WRITE_ATTEMPTS: int = int(os.getenv("STRIKE_WRITE_ATTEMPTS", "2"))

# When true, a strike counter write that keeps failing is raised to the caller
# as StrikeAddError/StrikeResetError instead of only being logged.
STRICT_STRIKE_WRITES: bool = os.getenv("STRICT_STRIKE_WRITES", "false").lower() == "true"

# --- Password Hashing ---

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24))
)

# Admin token for registering TEACHER/ADMIN accounts (set via ADMIN_TOKEN)
ADMIN_TOKEN: Optional[str] = os.getenv("ADMIN_TOKEN")

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list). The desktop front-end is served
# from a local dev server during development.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:1420,http://127.0.0.1:1420,tauri://localhost",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
