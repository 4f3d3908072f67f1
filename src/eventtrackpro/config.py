"""Configuration loader for EventTrackPro with environment-specific support"""

import os
from pathlib import Path

from dotenv import load_dotenv

project_dir = Path(__file__).parent.parent.parent
env_path = project_dir / ".env"

# Load .env file if it exists. For local development only.
if env_path.exists():
    load_dotenv(env_path)

# Configuration dictionary - set once at initialization
config = {
    "database_url": os.getenv("DATABASE_URL", "sqlite:///./eventtrackpro.db"),
    "port": int(os.getenv("PORT", "5000")),
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    "session_secret_key": os.getenv("SESSION_SECRET_KEY"),
    # Set to "false" for plain-HTTP local development
    "session_https_only": os.getenv("SESSION_HTTPS_ONLY", "true").lower() == "true",
    "webhook_timeout_seconds": float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10")),
    "webhook_max_concurrency": int(os.getenv("WEBHOOK_MAX_CONCURRENCY", "10")),
    # Seeded on startup when both are set and the user does not exist yet
    "admin_username": os.getenv("ADMIN_USERNAME"),
    "admin_password": os.getenv("ADMIN_PASSWORD"),
    "zapier_inbound_secret": os.getenv("ZAPIER_INBOUND_SECRET"),
    "environment": os.getenv("ENVIRONMENT"),
}
