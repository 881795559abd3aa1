"""
Socket.IO relay for chat presence and live message delivery.

The relay keeps a process-local registry of which socket belongs to which
user and forwards chat events to the recipient's socket when it is online.
Nothing is persisted here: clients store messages through the REST API and
use the relay only for live notification. Delivery is best-effort and
at-most-once; events for offline users are dropped.

Run with ``uvicorn relay:app --port 4000``.
"""
import logging
import threading
import time
from typing import Dict, List, Optional

import socketio
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from config import SOCKET_PORT, setup_logging

logger = logging.getLogger(__name__)

MAX_PAYLOAD_BYTES = 5_000_000

setup_logging()


class Registry:
    """userId -> socketId roster. The first registration for a user wins."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: List[Dict[str, str]] = []

    def put(self, user_id: str, socket_id: str) -> bool:
        with self._lock:
            if any(e["user_id"] == user_id for e in self._entries):
                return False
            self._entries.append({"user_id": user_id, "socket_id": socket_id})
            return True

    def remove(self, socket_id: str) -> None:
        with self._lock:
            self._entries = [e for e in self._entries if e["socket_id"] != socket_id]

    def lookup(self, user_id: str) -> Optional[str]:
        with self._lock:
            for e in self._entries:
                if e["user_id"] == user_id:
                    return e["socket_id"]
        return None

    def snapshot(self) -> List[Dict[str, str]]:
        with self._lock:
            return [dict(e) for e in self._entries]

    def __len__(self):
        with self._lock:
            return len(self._entries)


def build_message(sender_id: str, receiver_id: str, text: Optional[str] = None, images=None) -> dict:
    return {
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "text": text or "",
        "images": images or None,
        "seen": False,
        "created_at": int(time.time() * 1000),
    }


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*",
    max_http_buffer_size=MAX_PAYLOAD_BYTES,
)
registry = Registry()


@sio.event
async def connect(sid, environ, auth=None):
    logger.info("Socket connected: %s", sid)


@sio.on("addUser")
async def add_user(sid, user_id):
    if not user_id:
        return
    if registry.put(user_id, sid):
        logger.info("User %s registered on socket %s", user_id, sid)
    await sio.emit("getUsers", registry.snapshot())


@sio.on("sendMessage")
async def send_message(sid, data):
    data = data or {}
    sender_id, receiver_id = data.get("sender_id"), data.get("receiver_id")
    if not sender_id or not receiver_id:
        logger.warning("Dropped message from socket %s: missing sender or receiver", sid)
        return
    message = build_message(sender_id, receiver_id, data.get("text"), data.get("images"))
    target = registry.lookup(receiver_id)
    if target is None:
        logger.info("User %s offline, message from %s not relayed", receiver_id, sender_id)
        return
    await sio.emit("getMessage", message, to=target)


@sio.on("messageSeen")
async def message_seen(sid, data):
    data = data or {}
    target = registry.lookup(data.get("sender_id"))
    if target is None:
        return
    await sio.emit("messageSeen", {
        "sender_id": data.get("sender_id"),
        "receiver_id": data.get("receiver_id"),
        "message_id": data.get("message_id"),
    }, to=target)


@sio.on("updateLastMessage")
async def update_last_message(sid, data):
    data = data or {}
    await sio.emit("getLastMessage", {
        "last_message": data.get("last_message"),
        "last_message_id": data.get("last_message_id"),
    })


@sio.event
async def disconnect(sid, *args):
    logger.info("Socket disconnected: %s", sid)
    registry.remove(sid)
    await sio.emit("getUsers", registry.snapshot())


web = FastAPI(title="Marketplace Relay")


@web.get("/", response_class=PlainTextResponse)
def read_root():
    return "Hello world from socket server!"


app = socketio.ASGIApp(sio, other_asgi_app=web)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=SOCKET_PORT)
