"""
Session Identity - Persistence of the opaque session token.

The token is the only thing that survives a restart. The store never
inspects it: whether a token is still valid is for the builder service
to say.

Two stores are provided:
- MemoryIdentityStore: process-local, used by tests
- FileIdentityStore: one named key in a JSON file on disk
"""

from __future__ import annotations
from pathlib import Path
from typing import Protocol
import json
import logging

logger = logging.getLogger(__name__)


class SessionIdentityStore(Protocol):
    """Minimal interface the controller depends on."""

    def save(self, token: str) -> None: ...

    def load(self) -> str | None: ...

    def clear(self) -> None: ...


class MemoryIdentityStore:
    """In-memory store."""

    def __init__(self, token: str | None = None):
        self._token = token

    def save(self, token: str) -> None:
        self._token = token

    def load(self) -> str | None:
        return self._token

    def clear(self) -> None:
        self._token = None


class FileIdentityStore:
    """
    Token stored under one key of a JSON object on disk.

    Other keys in the file are preserved, so several clients can share
    a file. A missing or unreadable file is treated as "no token".

    Usage:
        store = FileIdentityStore("~/.wordbuilder/session.json")
        store.save("3f1c...")
        store.load()  # "3f1c..." even in a new process
    """

    def __init__(self, path: str | Path, key: str = "sessionId"):
        self.path = Path(path).expanduser()
        self.key = key

    def save(self, token: str) -> None:
        data = self._read()
        data[self.key] = token
        self._write(data)

    def load(self) -> str | None:
        token = self._read().get(self.key)
        return token if isinstance(token, str) and token else None

    def clear(self) -> None:
        data = self._read()
        if self.key not in data:
            return
        del data[self.key]
        self._write(data)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
