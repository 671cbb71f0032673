"""
VoxAnalysis v1 Credential Store - Remote report API key storage.

Responsibilities:
- CredentialStore capability: get / set / delete one opaque string
- JSON-file and in-memory implementations
- API key resolution with environment fallback

Invariants:
- The analysis pipeline never receives a store; only the remote report
  collaborator does
- JSON store preserves unrelated keys in its file
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping


logger = logging.getLogger("voxanalysis.credentials")

DEFAULT_STORE_FILE = "vox_config.json"
API_KEY_STORE_KEY = "gemini_api_key"
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


class CredentialStoreError(Exception):
    """Raised when the backing store cannot be read or written."""
    pass


class CredentialStore(ABC):
    """Durable holder for a single opaque secret string."""

    @abstractmethod
    def get(self) -> str | None:
        ...

    @abstractmethod
    def set(self, value: str) -> None:
        ...

    @abstractmethod
    def delete(self) -> None:
        ...


class InMemoryCredentialStore(CredentialStore):

    def __init__(self, value: str | None = None) -> None:
        self._value = value

    def get(self) -> str | None:
        return self._value

    def set(self, value: str) -> None:
        self._value = value

    def delete(self) -> None:
        self._value = None


class JsonFileCredentialStore(CredentialStore):
    """
    Store the secret under one key of a JSON object file.

    Args:
        path: JSON file location (created on first set)
        key: Object key holding the secret
    """

    def __init__(self, path: Path, key: str = API_KEY_STORE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialStoreError(f"Failed to open store: {e}") from e
        if not isinstance(raw, dict):
            raise CredentialStoreError(f"Failed to open store: {self.path} is not a JSON object")
        return raw

    def _persist(self, data: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as e:
            raise CredentialStoreError(f"Failed to save store: {e}") from e

    def get(self) -> str | None:
        value = self._load().get(self.key)
        return value if isinstance(value, str) else None

    def set(self, value: str) -> None:
        data = self._load()
        data[self.key] = value
        self._persist(data)
        logger.info("Stored credential '%s' in %s", self.key, self.path)

    def delete(self) -> None:
        data = self._load()
        if data.pop(self.key, None) is not None:
            logger.info("Deleted credential '%s' from %s", self.key, self.path)
        self._persist(data)


def resolve_api_key(
    store: CredentialStore | None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """
    Resolve the remote report API key.

    Order: stored value, then GEMINI_API_KEY, then API_KEY.
    Empty strings count as unset.
    """
    if store is not None:
        value = store.get()
        if value:
            return value

    environ = os.environ if environ is None else environ
    for name in API_KEY_ENV_VARS:
        value = environ.get(name)
        if value:
            return value
    return None


def mask_secret(value: str) -> str:
    """Printable form of a secret: first four characters, rest hidden."""
    if len(value) <= 4:
        return "*" * len(value)
    return value[:4] + "*" * (len(value) - 4)
