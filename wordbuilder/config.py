"""
Client configuration.

Values come from the environment so the same build can point at a local
backend or a deployed one:

    WORDBUILDER_API_URL         Builder service base URL
    WORDBUILDER_DICTIONARY_URL  Dictionary service base URL
    WORDBUILDER_TIMEOUT         Request timeout in seconds
    WORDBUILDER_SESSION_FILE    File holding the persisted session token
    WORDBUILDER_SESSION_KEY     Key of the token inside that file
    WORDBUILDER_LOG_LEVEL       Logging level for the CLI
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os

DEFAULT_API_URL = "http://localhost:8081/api/wordbuilder"
DEFAULT_DICTIONARY_URL = "http://localhost:8081/api/dictionary"
DEFAULT_TIMEOUT = 10.0
DEFAULT_SESSION_KEY = "sessionId"


def _default_session_file() -> Path:
    return Path.home() / ".wordbuilder" / "session.json"


@dataclass
class ClientConfig:
    """Settings shared by the remote clients and the session store."""
    api_url: str = DEFAULT_API_URL
    dictionary_url: str = DEFAULT_DICTIONARY_URL
    timeout: float = DEFAULT_TIMEOUT
    session_file: Path | None = None
    session_key: str = DEFAULT_SESSION_KEY
    log_level: str = "WARNING"

    def __post_init__(self):
        self.api_url = self.api_url.rstrip("/")
        self.dictionary_url = self.dictionary_url.rstrip("/")
        if self.session_file is None:
            self.session_file = _default_session_file()
        else:
            self.session_file = Path(self.session_file).expanduser()

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a config from WORDBUILDER_* environment variables."""
        timeout = os.getenv("WORDBUILDER_TIMEOUT")
        session_file = os.getenv("WORDBUILDER_SESSION_FILE")
        return cls(
            api_url=os.getenv("WORDBUILDER_API_URL", DEFAULT_API_URL),
            dictionary_url=os.getenv("WORDBUILDER_DICTIONARY_URL", DEFAULT_DICTIONARY_URL),
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
            session_file=Path(session_file) if session_file else None,
            session_key=os.getenv("WORDBUILDER_SESSION_KEY", DEFAULT_SESSION_KEY),
            log_level=os.getenv("WORDBUILDER_LOG_LEVEL", "WARNING").upper(),
        )
