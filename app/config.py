import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./reservations.db")

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH")

# Environment name, "production" tightens security headers
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

# Admission policy checks on top of schema validation and overlap detection
ENFORCE_BOOKING_RULES = os.getenv("ENFORCE_BOOKING_RULES", "false").lower() == "true"
ENFORCE_CALENDAR_CAPACITY = os.getenv("ENFORCE_CALENDAR_CAPACITY", "false").lower() == "true"

# Rate limiting for reservation creation
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RESERVATION_RATE_LIMIT = int(os.getenv("RESERVATION_RATE_LIMIT", "30"))
RESERVATION_RATE_WINDOW = int(os.getenv("RESERVATION_RATE_WINDOW", "60"))

# Default tenant timezone when a tenant has no settings
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")
