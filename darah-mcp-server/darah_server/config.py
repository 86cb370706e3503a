"""Server configuration read from the environment."""

import logging
import os
from typing import Optional

from pydantic import BaseModel

from .cart import DEFAULT_SESSION_MAX_AGE

logger = logging.getLogger(__name__)

DEFAULT_WHATSAPP_NUMBER = "5551999999999"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


class Settings(BaseModel):
    """Runtime settings."""

    whatsapp_number: str = DEFAULT_WHATSAPP_NUMBER
    store_name: str = "DARAH"
    catalog_file: Optional[str] = None
    session_cookie: str = "darah_session"
    session_max_age: int = DEFAULT_SESSION_MAX_AGE

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from environment variables.

        DARAH_WHATSAPP_NUMBER (or WHATSAPP_NUMBER), DARAH_STORE_NAME,
        DARAH_CATALOG_FILE, DARAH_SESSION_COOKIE and DARAH_SESSION_MAX_AGE
        override the defaults.
        """
        return cls(
            whatsapp_number=(
                os.environ.get("DARAH_WHATSAPP_NUMBER")
                or os.environ.get("WHATSAPP_NUMBER")
                or DEFAULT_WHATSAPP_NUMBER
            ),
            store_name=os.environ.get("DARAH_STORE_NAME") or "DARAH",
            catalog_file=os.environ.get("DARAH_CATALOG_FILE") or None,
            session_cookie=os.environ.get("DARAH_SESSION_COOKIE") or "darah_session",
            session_max_age=_env_int("DARAH_SESSION_MAX_AGE", DEFAULT_SESSION_MAX_AGE),
        )
