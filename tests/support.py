import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

_DATA_DIR = tempfile.mkdtemp(prefix="resume-enhancer-tests-")


def configure_test_env() -> None:
    """Point stores at a scratch directory and disable remote providers before app imports."""
    os.environ.setdefault("USERS_DB_PATH", os.path.join(_DATA_DIR, "users.db"))
    os.environ.setdefault("HISTORY_DB_PATH", os.path.join(_DATA_DIR, "history.db"))
    os.environ.setdefault("ANALYTICS_DB_PATH", os.path.join(_DATA_DIR, "analytics.db"))
    os.environ["RATE_LIMIT_ENABLED"] = "0"
    os.environ["JULES_API_KEY"] = ""
    os.environ["OPENAI_API_KEY"] = ""
    os.environ["API_KEY"] = ""
    os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests-only-0123456789")
