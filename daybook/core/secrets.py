#!/usr/bin/env python3
"""
secrets.py
----------
Credential storage interface for provider API keys.

The store never looks credentials up on its own. The surrounding
application passes a SecretStore (an OS keychain adapter, typically)
into DaybookDB, and the store only delegates get/set/delete by name.

Named keys:
    - AI_API_KEY: text polish/translation provider
    - TTS_API_KEY: speech synthesis provider
    - MURF_API_KEY: secondary speech synthesis provider
"""
from __future__ import annotations

from typing import Dict, Optional, Protocol

AI_API_KEY = "ai-api-key"
TTS_API_KEY = "tts-api-key"
MURF_API_KEY = "murf-api-key"

KNOWN_SECRETS = frozenset({AI_API_KEY, TTS_API_KEY, MURF_API_KEY})


class SecretStore(Protocol):
    """Protocol for injected credential stores."""

    def get(self, name: str) -> Optional[str]:
        ...

    def set(self, name: str, value: str) -> None:
        ...

    def delete(self, name: str) -> None:
        ...


class MemorySecretStore:
    """
    Process-local SecretStore.

    Used in tests and by callers that manage persistence themselves.
    Deleting an unknown name is a no-op.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._secrets: Dict[str, str] = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self._secrets.get(name)

    def set(self, name: str, value: str) -> None:
        self._secrets[name] = value

    def delete(self, name: str) -> None:
        self._secrets.pop(name, None)
