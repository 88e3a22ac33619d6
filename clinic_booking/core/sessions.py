"""Redis-backed session store for patient and staff sessions."""

from datetime import UTC, datetime

import structlog
from pydantic import TypeAdapter, ValidationError

from clinic_booking.config import settings
from clinic_booking.core.exceptions import PersistenceException
from clinic_booking.core.redis_client import CacheManager
from clinic_booking.core.security import generate_session_token
from clinic_booking.schemas.auth import Actor

logger = structlog.get_logger()

_actor_adapter: TypeAdapter[Actor] = TypeAdapter(Actor)


class SessionStore:
    """
    Maps opaque session tokens to authenticated actors.

    Each session lives under ``session:<token>`` with a TTL of
    ``SESSION_TTL_HOURS``. In sliding mode every successful lookup
    pushes the expiry forward; otherwise it stays fixed from issuance.
    """

    KEY_PREFIX = "session:"

    def __init__(
        self,
        cache_manager: CacheManager,
        ttl_seconds: int | None = None,
        sliding: bool | None = None,
    ):
        """Initialize the store with a cache manager and lifetime policy."""
        self.cache = cache_manager
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.session_ttl_seconds
        self.sliding = settings.session_sliding if sliding is None else sliding

    @classmethod
    def _key(cls, token: str) -> str:
        return f"{cls.KEY_PREFIX}{token}"

    def create(self, actor: Actor) -> str:
        """
        Issue a new session for an actor.

        Returns:
            The opaque session token

        Raises:
            PersistenceException: If the session could not be stored
        """
        token = generate_session_token()
        payload = actor.model_dump(mode="json")
        payload["issued_at"] = datetime.now(UTC).isoformat()

        if not self.cache.set_json(self._key(token), payload, ttl=self.ttl_seconds):
            logger.error("session_store_write_failed", kind=actor.kind)
            raise PersistenceException()

        logger.info("session_created", kind=actor.kind)
        return token

    def resolve(self, token: str | None) -> Actor | None:
        """Return the actor behind a token, or None if absent or expired."""
        if not token:
            return None

        payload = self.cache.get_json(self._key(token))
        if not payload:
            return None

        try:
            actor = _actor_adapter.validate_python(payload)
        except ValidationError:
            logger.warning("session_payload_invalid")
            return None

        if self.sliding:
            self.cache.touch(self._key(token), self.ttl_seconds)

        return actor

    def destroy(self, token: str | None) -> None:
        """Remove a session; unknown tokens are ignored."""
        if not token:
            return
        self.cache.delete(self._key(token))
        logger.info("session_destroyed")
