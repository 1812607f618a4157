"""Environment configuration for the clipboard session."""

import os
from pydantic import BaseModel
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_EDIT_TIMEOUT_MS = 3000
DEFAULT_HISTORY_LIMIT = 20
DEFAULT_MINIFIED_RATIO = 0.8


class SessionConfig(BaseModel):
    """Tunable settings for a clipboard session."""

    edit_timeout_ms: int = DEFAULT_EDIT_TIMEOUT_MS
    history_limit: int = DEFAULT_HISTORY_LIMIT
    auto_validate: bool = True
    minified_ratio: float = DEFAULT_MINIFIED_RATIO
    log_level: str = "INFO"


def load_config() -> SessionConfig:
    """Build configuration from environment variables."""
    return SessionConfig(
        edit_timeout_ms=int(
            os.getenv("CLIPBOARD_EDIT_TIMEOUT_MS", str(DEFAULT_EDIT_TIMEOUT_MS))
        ),
        history_limit=int(
            os.getenv("CLIPBOARD_HISTORY_LIMIT", str(DEFAULT_HISTORY_LIMIT))
        ),
        auto_validate=os.getenv("CLIPBOARD_AUTO_VALIDATE", "true").lower() == "true",
        minified_ratio=float(
            os.getenv("CLIPBOARD_MINIFIED_RATIO", str(DEFAULT_MINIFIED_RATIO))
        ),
        log_level=os.getenv("CLIPBOARD_LOG_LEVEL", "INFO").upper(),
    )
