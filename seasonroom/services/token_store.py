"""Persistent storage of the session's access/refresh tokens."""
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from seasonroom.core.config import settings
from seasonroom.schemas.common import TokenPair

logger = logging.getLogger(__name__)


class TokenStore:
    """Keeps the token pair in a JSON file so it survives restarts."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.TOKEN_STORE_PATH)
        self._tokens: Optional[TokenPair] = None
        self._loaded = False

    def _load(self) -> Optional[TokenPair]:
        if self._loaded:
            return self._tokens
        self._loaded = True

        if not self.path.exists():
            return None

        try:
            self._tokens = TokenPair.model_validate_json(self.path.read_text())
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            self._tokens = None
        return self._tokens

    @property
    def access_token(self) -> Optional[str]:
        tokens = self._load()
        return tokens.access_token if tokens else None

    @property
    def refresh_token(self) -> Optional[str]:
        tokens = self._load()
        return tokens.refresh_token if tokens else None

    def save(self, tokens: TokenPair) -> None:
        """Store a new pair, keeping the old refresh token if none was issued."""
        if tokens.refresh_token is None and self.refresh_token is not None:
            tokens = TokenPair(access_token=tokens.access_token, refresh_token=self.refresh_token)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(tokens.model_dump_json(by_alias=True))
        self._tokens = tokens
        self._loaded = True

    def clear(self) -> None:
        logger.info("Clearing stored session tokens")
        self._tokens = None
        self._loaded = True
        if self.path.exists():
            self.path.unlink()
