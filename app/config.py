import os
from dotenv import load_dotenv

# ---------------------------
# Load environment variables
# ---------------------------
load_dotenv()

# ---------------------------
# Auth
# ---------------------------
SECRET_KEY = os.getenv("SECRET_KEY")

if not SECRET_KEY:
    raise ValueError("❌ SECRET_KEY is not set in the .env file")

ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# ---------------------------
# Reporting
# ---------------------------
# Naive timestamps (e.g. "2025-03-01T23:59" from a datetime-local input)
# are read in this zone.
SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE", "UTC")

ACTIVITY_FEED_LIMIT = int(os.getenv("ACTIVITY_FEED_LIMIT", 10))
RECENT_ACTIVITY_DAYS = int(os.getenv("RECENT_ACTIVITY_DAYS", 7))
DEADLINE_REMINDER_DAYS = int(os.getenv("DEADLINE_REMINDER_DAYS", 3))

# ---------------------------
# Logging
# ---------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
