import json
import time
import logging
from typing import Optional, Dict, Any
from urllib.parse import parse_qsl

from starlette.concurrency import run_in_threadpool
from starlette.types import ASGIApp, Receive, Scope, Send, Message

from core.audit import first_forwarded_hop
from database.database import SessionLocal
from models.access_log import AccessLog

logger = logging.getLogger(__name__)

# polling endpoints; recording them would feed the traffic view back into itself
SKIP_PATHS = ("/api/admin/traffic", "/api/admin/system-health")
ALLOWED_HEADERS = ("referer", "origin", "host", "content-type")
REDACTED = "***REDACTED***"


def should_record(path: str) -> bool:
    return not any(skip in path for skip in SKIP_PATHS)


def sanitize_body(raw: bytes) -> Optional[Dict[str, Any]]:
    if not raw:
        return None
    try:
        body = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(body, dict) or not body:
        return None
    body = dict(body)
    if "password" in body:
        body["password"] = REDACTED
    return body


def filter_headers(headers: Dict[str, str]) -> Dict[str, Optional[str]]:
    return {name: headers.get(name) for name in ALLOWED_HEADERS}


class TrafficRecorder:
    """ASGI middleware writing one access_logs row per HTTP request.

    The row is written after the response has been sent. Any failure while
    writing is logged and dropped.
    """

    def __init__(self, app: ASGIApp, session_factory=None):
        self.app = app
        self.session_factory = session_factory or SessionLocal

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        body_chunks = []
        response = {"status": 500}
        # request.state inside handlers writes into this dict
        scope.setdefault("state", {})

        async def receive_wrapper() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                body_chunks.append(message.get("body", b""))
            return message

        async def send_wrapper(message: Message):
            if message["type"] == "http.response.start":
                response["status"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        finally:
            if should_record(scope.get("path", "")):
                duration_ms = int((time.perf_counter() - start) * 1000)
                entry = self.build_entry(scope, b"".join(body_chunks), response["status"], duration_ms)
                await run_in_threadpool(self.record, entry)

    def build_entry(self, scope: Scope, raw_body: bytes, status_code: int, duration_ms: int) -> Dict[str, Any]:
        headers = {
            key.decode("latin-1").lower(): value.decode("latin-1")
            for key, value in scope.get("headers", [])
        }
        ip = first_forwarded_hop(headers.get("x-forwarded-for"))
        if not ip and scope.get("client"):
            ip = scope["client"][0]

        query = dict(parse_qsl(scope.get("query_string", b"").decode("latin-1")))
        actor = scope.get("state", {}).get("actor")

        return {
            "ip_address": ip,
            "method": scope.get("method"),
            "path": scope.get("path"),
            "status_code": status_code,
            "duration_ms": duration_ms,
            "user_agent": headers.get("user-agent"),
            "meta": actor or None,
            "request_body": sanitize_body(raw_body),
            "query_params": query or None,
            "headers": filter_headers(headers),
        }

    def record(self, entry: Dict[str, Any]) -> None:
        db = None
        try:
            db = self.session_factory()
            db.add(AccessLog(**entry))
            db.commit()
        except Exception as e:
            logger.error("Traffic log error: %s", e)
            if db is not None:
                try:
                    db.rollback()
                except Exception:
                    logger.exception("Traffic log rollback failed")
        finally:
            if db is not None:
                db.close()
