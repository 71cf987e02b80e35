import secrets
from datetime import timedelta
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from casaconnect.core.core import Service
from casaconnect.core.modules.session.cipher import SessionCipher, SessionDecryptError
from casaconnect.core.modules.session.models import SessionRecord
from casaconnect.utils import now

logger = structlog.get_logger(__name__)


class MongoSessionStore(Service):
    """Durable session storage in the `sessions` collection.

    Session data is stored encrypted with a key derived from the session
    secret; a record that does not decrypt is treated as absent. Expired
    records are swept by a MongoDB TTL index on `expires_at`. Until the sweep
    runs, `load` treats them as absent. Errors from the driver are not caught
    here: a request that cannot reach the store fails.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("sessions")
        self._cipher: SessionCipher | None = None

    @property
    def cipher(self) -> SessionCipher:
        if self._cipher is None:
            self._cipher = SessionCipher(self.core.session_config.secret)
        return self._cipher

    @property
    def max_age(self) -> timedelta:
        return timedelta(seconds=self.core.session_config.cookie.max_age_seconds)

    @property
    def touch_after(self) -> timedelta:
        return timedelta(seconds=self.core.session_config.touch_after_seconds)

    async def on_start(self) -> None:
        """Create the TTL index on startup."""
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)

    async def load(self, session_id: str) -> SessionRecord | None:
        doc = await self._collection.find_one({"_id": session_id})
        if doc is None:
            return None
        encrypted = doc.get("data")
        try:
            if not isinstance(encrypted, str):
                raise SessionDecryptError("Session data is not encrypted")
            data = self.cipher.decrypt(encrypted)
        except SessionDecryptError:
            logger.warning("session_undecryptable", session_id=session_id[:8])
            return None
        record = SessionRecord.model_validate({**doc, "data": data})
        if record.expires_at <= now():
            return None
        return record

    async def save(self, session_id: str, data: dict[str, Any]) -> SessionRecord:
        """Write session data encrypted and push expiry forward."""
        current = now()
        record = SessionRecord(id=session_id, data=data, expires_at=current + self.max_age, touched_at=current)
        doc = {**record.to_mongo(), "data": self.cipher.encrypt(record.data)}
        await self._collection.replace_one({"_id": session_id}, doc, upsert=True)
        return record

    async def touch(self, record: SessionRecord) -> bool:
        """Extend expiry of an unmodified session, at most once per touch_after window."""
        current = now()
        if current - record.touched_at < self.touch_after:
            return False
        await self._collection.update_one(
            {"_id": record.id},
            {"$set": {"expires_at": current + self.max_age, "touched_at": current}},
        )
        logger.debug("session_touched", session_id=record.id[:8])
        return True

    async def destroy(self, session_id: str) -> None:
        await self._collection.delete_one({"_id": session_id})

