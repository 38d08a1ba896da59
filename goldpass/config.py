"""Gold Pass service configuration constants.

Environment-based configuration, read once at import:
- DEPLOYMENT: environment name, public base URL
- PERSISTENCE: database URL and store timeouts
- SECRETS: UID and token keys
- POLICY: rate limits, phone defaults, signer endpoint
"""
import os
from pathlib import Path


# =============================================================================
# DEPLOYMENT
# =============================================================================

ENVIRONMENT: str = os.getenv("GOLDPASS_ENV", "development").lower()
IS_PRODUCTION: bool = ENVIRONMENT == "production"

# Public base URL used for verification, short links and pass URLs.
# Must be https: every URL embedded in a pass is validated as https.
BASE_URL: str = os.getenv("GOLDPASS_BASE_URL", "https://hushh-gold-pass-mvp.vercel.app").rstrip("/")

SERVICE_PORT: int = int(os.getenv("GOLDPASS_PORT", "8000"))


# =============================================================================
# PERSISTENCE CONFIGURATION
# =============================================================================

def _get_data_dir() -> Path:
    """Determine data directory based on environment.

    Priority:
    1. GOLDPASS_DATA_DIR env var (explicit override)
    2. /data/goldpass if it exists (Docker volume mount)
    3. ~/.goldpass (local development)
    4. /tmp/goldpass (container fallback when home unavailable)
    """
    env_path = os.getenv("GOLDPASS_DATA_DIR")
    if env_path:
        return Path(env_path)

    docker_path = Path("/data/goldpass")
    if docker_path.exists():
        return docker_path

    try:
        home_path = Path.home() / ".goldpass"
        home_path.mkdir(parents=True, exist_ok=True)
        return home_path
    except (OSError, PermissionError):
        return Path("/tmp/goldpass")


def _get_database_url() -> str:
    """Get database URL from environment.

    Priority:
    1. GOLDPASS_DATABASE_URL - explicit full connection string
    2. GOLDPASS_POSTGRES_* - construct PostgreSQL URL from components
    3. SQLite fallback for local development
    """
    if url := os.getenv("GOLDPASS_DATABASE_URL"):
        return url

    host = os.getenv("GOLDPASS_POSTGRES_HOST")
    if host:
        user = os.getenv("GOLDPASS_POSTGRES_USER", "goldpass")
        password = os.getenv("GOLDPASS_POSTGRES_PASSWORD", "")
        db = os.getenv("GOLDPASS_POSTGRES_DB", "goldpass")
        return f"postgresql+psycopg://{user}:{password}@{host}/{db}?sslmode=require"

    return f"sqlite:///{_get_data_dir()}/goldpass.db"


DATABASE_URL: str = _get_database_url()

# Upper bound for any single store call (pool checkout, lock wait, statement)
STORE_TIMEOUT_SECONDS: float = float(os.getenv("GOLDPASS_STORE_TIMEOUT_SECONDS", "5.0"))


# =============================================================================
# PASS SIGNER (external collaborator)
# =============================================================================

SIGNER_URL: str = os.getenv("GOLDPASS_SIGNER_URL", "http://localhost:8100/sign")
SIGNER_TIMEOUT_SECONDS: float = float(os.getenv("GOLDPASS_SIGNER_TIMEOUT_SECONDS", "10.0"))


# =============================================================================
# SECRETS
# =============================================================================

# Development-only fallback. Production startup refuses to run with it.
DEV_FALLBACK_SECRET = "goldpass-dev-secret-do-not-use-in-production"

UID_SECRET: str = os.getenv("GOLDPASS_UID_SECRET", "") or DEV_FALLBACK_SECRET
TOKEN_SECRET: str = os.getenv("GOLDPASS_TOKEN_SECRET", "") or DEV_FALLBACK_SECRET

# bcrypt cost factor for edit token hashes (2^12 = 4096 iterations)
TOKEN_BCRYPT_ROUNDS: int = int(os.getenv("GOLDPASS_TOKEN_BCRYPT_ROUNDS", "12"))


def validate_secrets_config() -> tuple[bool, str | None]:
    """Validate that hashing secrets are configured for this environment.

    Returns:
        Tuple of (is_valid, error_message). If is_valid is False,
        error_message contains the reason.
    """
    if not IS_PRODUCTION:
        return True, None

    fallback = []
    if UID_SECRET == DEV_FALLBACK_SECRET:
        fallback.append("GOLDPASS_UID_SECRET")
    if TOKEN_SECRET == DEV_FALLBACK_SECRET:
        fallback.append("GOLDPASS_TOKEN_SECRET")

    if fallback:
        return False, f"Production deployment missing secrets: {', '.join(fallback)}"

    if not BASE_URL.startswith("https://"):
        return False, f"GOLDPASS_BASE_URL must be https in production: {BASE_URL}"

    return True, None


# =============================================================================
# POLICY
# =============================================================================

# Country code assumed for national (10-digit) phone numbers
DEFAULT_COUNTRY_CODE: str = os.getenv("GOLDPASS_DEFAULT_COUNTRY_CODE", "1")

# Requests per client IP per wall-clock hour
CLAIM_RATE_LIMIT: int = int(os.getenv("GOLDPASS_CLAIM_RATE_LIMIT", "10"))
PROFILE_RATE_LIMIT: int = int(os.getenv("GOLDPASS_PROFILE_RATE_LIMIT", "20"))


# =============================================================================
# OPERATIONAL
# =============================================================================

LOG_LEVEL: str = os.getenv("GOLDPASS_LOG_LEVEL", "INFO").upper()
LOG_FILE: str = os.getenv("GOLDPASS_LOG_FILE", "goldpass.log")
