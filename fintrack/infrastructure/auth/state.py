"""Shared authentication state owned by the application"""

import hashlib
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from fintrack.domain.models import AuthenticatedUser

AuthListener = Callable[[str, Optional[AuthenticatedUser]], None]

logger = logging.getLogger(__name__)


def token_hint(token: str) -> str:
    """Stable, non-reversible short identifier for a token (safe to log)"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthStateStore:
    """
    One verified-identity cache shared by every request handler.

    Created by the app factory and kept on `app.state`, so concurrent
    requests with the same token hit the identity provider once per TTL.
    Subscribers are told about every sign-in (user) and sign-out (None).
    Tokens are only kept as SHA-256 digests.
    """

    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], datetime] = _utcnow):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, Tuple[AuthenticatedUser, datetime]] = {}
        self._listeners: List[AuthListener] = []
        self._lock = threading.Lock()
        self._closed = False

    def current(self, token: str) -> Optional[AuthenticatedUser]:
        """Cached identity for the token, or None when unknown or expired"""
        key = token_hint(token)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            user, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return user

    def publish(self, token: str, user: AuthenticatedUser) -> None:
        """Record a verified sign-in and notify subscribers"""
        expires_at = self._clock() + self.ttl
        if user.expires_at is not None:
            expires_at = min(expires_at, user.expires_at)

        key = token_hint(token)
        with self._lock:
            if self._closed:
                raise RuntimeError("Auth state store is closed")
            self._entries[key] = (user, expires_at)
            listeners = list(self._listeners)

        self._notify(listeners, key, user)

    def revoke(self, token: str) -> bool:
        """Forget a token (sign-out). Returns False if it was not cached."""
        key = token_hint(token)
        with self._lock:
            removed = self._entries.pop(key, None)
            listeners = list(self._listeners)

        if removed is None:
            return False
        self._notify(listeners, key, None)
        return True

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it"""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Drop all cached identities and listeners (application shutdown)"""
        with self._lock:
            self._entries.clear()
            self._listeners.clear()
            self._closed = True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def _notify(listeners: List[AuthListener], key: str, user: Optional[AuthenticatedUser]) -> None:
        for listener in listeners:
            try:
                listener(key, user)
            except Exception:
                logger.exception("Auth state listener failed", extra={"token_hint": key})
