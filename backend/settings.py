import os
from pathlib import Path

from dotenv import load_dotenv

from models.common import parse_bool

# Load environment variables from .env file in the backend folder
backend_dir = Path(__file__).parent
env_path = backend_dir / ".env"
load_dotenv(env_path)

SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")
if not SESSION_SECRET_KEY:  # pragma: no cover
    raise ValueError("SESSION_SECRET_KEY must be set")

API_PREFIX = os.getenv("API_PREFIX", "")
BACKEND_DIR = Path(__file__).parent
DATABASE_PATH = BACKEND_DIR / "huddle.sqlite"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_PATH}")
PROJECT_PATH = BACKEND_DIR.parent

TESTING_MODE = parse_bool(os.getenv("TESTING_MODE", False))

# --- Social graph limits ---
MAX_FRIENDS = int(os.getenv("MAX_FRIENDS", "500"))

# --- Feed / content ---
FEED_PAGE_SIZE = int(os.getenv("FEED_PAGE_SIZE", "10"))
NOTIFICATIONS_PAGE_SIZE = int(os.getenv("NOTIFICATIONS_PAGE_SIZE", "50"))
MAX_POST_BLOCKS = int(os.getenv("MAX_POST_BLOCKS", "50"))
MAX_COMMENT_LENGTH = int(os.getenv("MAX_COMMENT_LENGTH", "500"))
