"""Store-backed session middleware.

Works like Starlette's cookie SessionMiddleware, except that the cookie only
carries a signed session id and the data lives in the session store. The
cookie is re-issued on every response of a live session, so the 30 day
expiry slides forward with use.
"""

import copy
from typing import Any

import structlog
from itsdangerous import BadSignature, TimestampSigner
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from casaconnect.core.modules.session.models import SessionConfig, SessionRecord
from casaconnect.core.modules.session.store import MongoSessionStore

logger = structlog.get_logger(__name__)

EXPIRED = "expires=Thu, 01 Jan 1970 00:00:00 GMT; Max-Age=0; "


class StoreSessionMiddleware:
    def __init__(self, app: ASGIApp, store: MongoSessionStore, session_config: SessionConfig, path: str = "/") -> None:
        self.app = app
        self.store = store
        self.session_config = session_config
        self.signer = TimestampSigner(session_config.secret)
        self.cookie_name = session_config.cookie_name
        self.path = path
        policy = session_config.cookie
        self.max_age = policy.max_age_seconds
        self.security_flags = f"httponly; samesite={policy.same_site}"
        if policy.secure:
            self.security_flags += "; secure"

    def _read_session_id(self, connection: HTTPConnection) -> str | None:
        raw = connection.cookies.get(self.cookie_name)
        if not raw:
            return None
        try:
            return self.signer.unsign(raw.encode("utf-8"), max_age=self.max_age).decode("utf-8")
        except BadSignature:
            logger.info("session_cookie_rejected")
            return None

    def _cookie(self, value: str, attrs: str) -> str:
        return f"{self.cookie_name}={value}; path={self.path}; {attrs}{self.security_flags}"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        session_id = self._read_session_id(connection)
        record: SessionRecord | None = None
        if session_id is not None:
            record = await self.store.load(session_id)

        initial: dict[str, Any] = copy.deepcopy(record.data) if record is not None else {}
        scope["session"] = copy.deepcopy(initial)
        had_cookie = self.cookie_name in connection.cookies

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                cookie = await self._commit(record, initial, scope["session"], had_cookie)
                if cookie is not None:
                    headers = MutableHeaders(scope=message)
                    headers.append("Set-Cookie", cookie)
            await send(message)

        await self.app(scope, receive, send_wrapper)

    async def _commit(
        self, record: SessionRecord | None, initial: dict[str, Any], current: dict[str, Any], had_cookie: bool
    ) -> str | None:
        """Persist session changes and return the Set-Cookie value, if any."""
        if not current:
            if record is not None:
                await self.store.destroy(record.id)
            if had_cookie:
                return self._cookie("null", EXPIRED)
            return None

        if record is None:
            session_id = self.store.new_session_id()
            await self.store.save(session_id, current)
        elif current != initial:
            session_id = record.id
            await self.store.save(session_id, current)
        else:
            session_id = record.id
            await self.store.touch(record)

        signed = self.signer.sign(session_id.encode("utf-8")).decode("utf-8")
        return self._cookie(signed, f"Max-Age={self.max_age}; ")
