"""
Bearer-token providers.

A provider is any zero-argument callable returning the current token or None.
The token itself is owned by the auth flow; nothing here ever writes it.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from learner_analytics.config import Settings

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class StaticTokenProvider:
    def __init__(self, token: Optional[str]):
        self.token = token or None

    def __call__(self) -> Optional[str]:
        return self.token


class FileTokenStore:
    """Reads the persisted session token on every call."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def __call__(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except OSError as e:
            logger.debug(f"No token at {self.path}: {e}")
            return None
        return token or None


def chain_providers(*providers: TokenProvider) -> TokenProvider:
    def provider() -> Optional[str]:
        for p in providers:
            token = p()
            if token:
                return token
        return None
    return provider


def default_token_provider(settings: Settings) -> TokenProvider:
    return chain_providers(StaticTokenProvider(settings.token), FileTokenStore(settings.token_file))
