# core/utils.py

import re
import uuid
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp (stored columns carry no tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


# -----------------------------------------------------
# Filename sanitizer
# -----------------------------------------------------
def safe_filename(filename: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", filename)


def clean_text(value) -> str | None:
    """
    Strip strings, turn blank strings into None.
    Non-string values pass through str() first.
    """
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped or None
