"""
Password hashing, session tokens and account activation.

Sessions and pending activations are plain documents in the `session` and
`activation` collections; a token is valid while its `expires_at` (epoch
seconds) lies in the future.
"""
import logging
import secrets
import time
from typing import Optional

import bcrypt
from bson import ObjectId
from fastapi import Cookie, Depends, Header, HTTPException, Response

from config import ACTIVATION_TTL_MINUTES, SESSION_TTL_DAYS
from database import db

logger = logging.getLogger(__name__)

USER_COOKIE = "token"
SELLER_COOKIE = "seller_token"


# ---------- Passwords ----------

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


# ---------- Sessions ----------

def create_session(owner_id: str, kind: str) -> str:
    token = secrets.token_urlsafe(32)
    db["session"].insert_one({
        "token": token,
        "owner_id": owner_id,
        "kind": kind,
        "expires_at": time.time() + SESSION_TTL_DAYS * 86400,
    })
    return token


def end_session(token: Optional[str]) -> None:
    if token:
        db["session"].delete_one({"token": token})


def set_session_cookie(response: Response, name: str, token: str) -> None:
    response.set_cookie(name, token, max_age=SESSION_TTL_DAYS * 86400, httponly=True, samesite="none", secure=True)


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1]
    return None


def _session_owner(token: Optional[str], kind: str) -> str:
    if not token:
        raise HTTPException(status_code=401, detail="Please login to continue")
    session = db["session"].find_one({"token": token, "kind": kind, "expires_at": {"$gt": time.time()}})
    if not session:
        raise HTTPException(status_code=401, detail="Session expired")
    return session["owner_id"]


def get_current_user(authorization: Optional[str] = Header(None), token: Optional[str] = Cookie(None)) -> dict:
    owner_id = _session_owner(_bearer(authorization) or token, "user")
    user = db["user"].find_one({"_id": ObjectId(owner_id)})
    if not user:
        raise HTTPException(status_code=400, detail="User doesn't exists")
    return user


def get_current_seller(authorization: Optional[str] = Header(None), seller_token: Optional[str] = Cookie(None)) -> dict:
    owner_id = _session_owner(_bearer(authorization) or seller_token, "seller")
    seller = db["shop"].find_one({"_id": ObjectId(owner_id)})
    if not seller:
        raise HTTPException(status_code=400, detail="User doesn't exists")
    return seller


def get_admin(user: dict = Depends(get_current_user)) -> dict:
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail=f"{user.get('role', 'user')} can not access this resources!")
    return user


# ---------- Activation ----------

def create_activation(kind: str, payload: dict) -> str:
    token = secrets.token_urlsafe(24)
    db["activation"].insert_one({
        "token": token,
        "kind": kind,
        "payload": payload,
        "expires_at": time.time() + ACTIVATION_TTL_MINUTES * 60,
    })
    return token


def discard_activation(token: str) -> None:
    db["activation"].delete_one({"token": token})


def consume_activation(token: Optional[str], kind: str) -> Optional[dict]:
    """Return the pending account for a live token and remove it; None when unknown or expired."""
    if not token:
        return None
    pending = db["activation"].find_one_and_delete({"token": token, "kind": kind})
    if not pending or pending["expires_at"] <= time.time():
        logger.info("Rejected %s activation token", kind)
        return None
    return pending["payload"]
