import os
from pathlib import Path
from urllib.parse import urlparse
from dotenv import load_dotenv

# Load .env file from project root
ENV_PATH = Path(__file__).parent.parent / ".env"
load_dotenv(ENV_PATH)

# Server settings
PORT = int(os.getenv("PORT", "8000"))
HOST = os.getenv("HOST", "0.0.0.0")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Storage: "postgres", "memory", or "auto" (postgres when DATABASE_URL works, else memory)
DATABASE_URL = os.getenv("DATABASE_URL", "")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "auto").lower()

# How many times a claim/unclaim re-reads the lineup after losing a concurrent write
CLAIM_MAX_RETRIES = int(os.getenv("CLAIM_MAX_RETRIES", "10"))


def get_db_config(database_url: str = ""):
    """Parse DATABASE_URL into connection parameters."""
    url = database_url or DATABASE_URL
    if not url:
        raise ValueError("DATABASE_URL environment variable is required")

    parsed = urlparse(url)
    return {
        "host": parsed.hostname,
        "port": parsed.port or 5432,
        "database": parsed.path[1:],  # Remove leading /
        "user": parsed.username,
        "password": parsed.password,
    }

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
