"""
Token Storage - durable persistence of the access token and profile snapshot
"""
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import sessionmaker

from saldo.infrastructure.storage.models import StoredItem
from saldo.infrastructure.storage.session import get_session_factory

logger = logging.getLogger(__name__)

TOKEN_KEY = "@auth_token"
REFRESH_TOKEN_KEY = "@refresh_token"  # legacy, only ever removed
CLIENT_DATA_KEY = "@client_data"

SESSION_KEYS = (TOKEN_KEY, REFRESH_TOKEN_KEY, CLIENT_DATA_KEY)


class TokenStorage:
    """
    Repository for the persisted session (token + cached client profile)

    Invariant: at most one access token is stored at a time; save() replaces
    whatever was there.
    """

    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory or get_session_factory()

    # === Access token ===

    def save(self, token: str) -> None:
        """
        Persist access token (replaces the previous one)

        Raises:
            ValueError: if token is empty
        """
        if not token:
            raise ValueError("Token must not be empty")
        self._put(TOKEN_KEY, token)

    def get(self) -> Optional[str]:
        """Stored access token or None"""
        return self._get(TOKEN_KEY)

    def has_session(self) -> bool:
        return self.get() is not None

    # === Profile snapshot ===

    def save_profile(self, profile: Any) -> None:
        """
        Persist client profile snapshot

        Args:
            profile: ClientProfile (pydantic) or plain dict in wire format
        """
        if hasattr(profile, "model_dump"):
            profile = profile.model_dump(mode="json", by_alias=True)
        self._put(CLIENT_DATA_KEY, json.dumps(profile, ensure_ascii=False))

    def get_profile(self) -> Optional[Dict[str, Any]]:
        """Stored profile snapshot (wire format dict) or None"""
        raw = self._get(CLIENT_DATA_KEY)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Stored client profile is not valid JSON, ignoring it")
            return None

    # === Session ===

    def clear(self) -> None:
        """
        Remove token and profile in a single transaction
        """
        with self._session_factory() as db:
            db.query(StoredItem).filter(
                StoredItem.key.in_(SESSION_KEYS)
            ).delete(synchronize_session=False)
            db.commit()

    # === Helpers ===

    def _put(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            item = db.get(StoredItem, key)
            if item is None:
                db.add(StoredItem(key=key, value=value))
            else:
                item.value = value
            db.commit()

    def _get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            item = db.get(StoredItem, key)
            return item.value if item else None
