import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response
from pydantic import BaseModel, EmailStr

import mailer
from auth import (
    USER_COOKIE, consume_activation, create_activation, create_session, discard_activation, end_session,
    get_admin, get_current_user, hash_password, set_session_cookie, verify_password,
)
from config import FRONTEND_URL
from database import create_document, db, get_documents, serialize
from routers import to_obj_id
from schemas import Address, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["users"])


class SignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    avatar: Optional[str] = None


class ActivationRequest(BaseModel):
    activation_token: str


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UpdateInfoRequest(BaseModel):
    email: EmailStr
    password: str
    phone_number: Optional[str] = None
    name: Optional[str] = None


class AvatarRequest(BaseModel):
    avatar: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    old_password: str
    new_password: str
    confirm_password: str


def _reload(user_id) -> dict:
    return serialize(db["user"].find_one({"_id": user_id}))


@router.post("/create-user", status_code=201)
def create_user(payload: SignupRequest):
    email = payload.email.lower()
    if db["user"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="User already exists")
    token = create_activation("user", {
        "name": payload.name,
        "email": email,
        "password_hash": hash_password(payload.password),
        "avatar": payload.avatar,
    })
    activation_url = f"{FRONTEND_URL}/activation/{token}"
    try:
        mailer.send_mail(
            email,
            "Activate your account",
            f"Hello {payload.name}, please click on the link to activate your account: {activation_url}",
        )
    except mailer.MailDeliveryError:
        discard_activation(token)
        raise
    return {"success": True, "message": f"please check your email:- {email} to activate your account!"}


@router.post("/activation", status_code=201)
def activate_user(payload: ActivationRequest, response: Response):
    pending = consume_activation(payload.activation_token, "user")
    if not pending:
        raise HTTPException(status_code=400, detail="Invalid token")
    if db["user"].find_one({"email": pending["email"]}):
        raise HTTPException(status_code=400, detail="User already exists")
    user_id = create_document("user", User(**pending))
    logger.info("Activated user %s", user_id)
    token = create_session(user_id, "user")
    set_session_cookie(response, USER_COOKIE, token)
    return {"success": True, "user": _reload(to_obj_id(user_id)), "token": token}


@router.post("/login-user", status_code=201)
def login_user(payload: LoginRequest, response: Response):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Please provide the all fields!")
    user = db["user"].find_one({"email": payload.email.lower()})
    if not user:
        raise HTTPException(status_code=400, detail="User doesn't exists!")
    if not verify_password(payload.password, user.get("password_hash")):
        raise HTTPException(status_code=400, detail="Please provide the correct information")
    token = create_session(str(user["_id"]), "user")
    set_session_cookie(response, USER_COOKIE, token)
    return {"success": True, "user": serialize(user), "token": token}


@router.get("/getuser")
def get_user(user: dict = Depends(get_current_user)):
    return {"success": True, "user": serialize(user)}


@router.get("/logout", status_code=201)
def logout(response: Response, authorization: Optional[str] = Header(None), token: Optional[str] = Cookie(None)):
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1]
    end_session(token)
    response.delete_cookie(USER_COOKIE)
    return {"success": True, "message": "Log out successful!"}


@router.put("/update-user-info", status_code=201)
def update_user_info(payload: UpdateInfoRequest, current: dict = Depends(get_current_user)):
    user = db["user"].find_one({"email": payload.email.lower()})
    if not user:
        raise HTTPException(status_code=400, detail="User not found")
    if not verify_password(payload.password, user.get("password_hash")):
        raise HTTPException(status_code=400, detail="Please provide the correct information")
    update = payload.model_dump(include={"name", "phone_number"}, exclude_none=True)
    if update:
        db["user"].update_one({"_id": user["_id"]}, {"$set": update})
    return {"success": True, "user": _reload(user["_id"])}


@router.put("/update-avatar")
def update_avatar(payload: AvatarRequest, user: dict = Depends(get_current_user)):
    if payload.avatar:
        db["user"].update_one({"_id": user["_id"]}, {"$set": {"avatar": payload.avatar}})
    return {"success": True, "user": _reload(user["_id"])}


@router.put("/update-user-addresses")
def update_user_addresses(address: Address, user: dict = Depends(get_current_user)):
    addresses = user.get("addresses", [])
    same_type = next((a for a in addresses if a["address_type"] == address.address_type), None)
    if same_type and same_type.get("id") != address.id:
        raise HTTPException(status_code=400, detail=f"{address.address_type} address already exists")

    existing = next((a for a in addresses if address.id and a.get("id") == address.id), None)
    if existing:
        existing.update(address.model_dump(exclude={"id"}))
    else:
        entry = address.model_dump()
        entry["id"] = uuid.uuid4().hex
        addresses.append(entry)
    db["user"].update_one({"_id": user["_id"]}, {"$set": {"addresses": addresses}})
    return {"success": True, "user": _reload(user["_id"])}


@router.delete("/delete-user-address/{address_id}")
def delete_user_address(address_id: str, user: dict = Depends(get_current_user)):
    db["user"].update_one({"_id": user["_id"]}, {"$pull": {"addresses": {"id": address_id}}})
    return {"success": True, "user": _reload(user["_id"])}


@router.put("/update-user-password")
def update_user_password(payload: PasswordChangeRequest, user: dict = Depends(get_current_user)):
    if not verify_password(payload.old_password, user.get("password_hash")):
        raise HTTPException(status_code=400, detail="Old password is incorrect!")
    if payload.new_password != payload.confirm_password:
        raise HTTPException(status_code=400, detail="Password doesn't matched with each other!")
    db["user"].update_one({"_id": user["_id"]}, {"$set": {"password_hash": hash_password(payload.new_password)}})
    return {"success": True, "message": "Password updated successfully!"}


@router.get("/user-info/{user_id}", status_code=201)
def user_info(user_id: str):
    user = db["user"].find_one({"_id": to_obj_id(user_id)})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "user": serialize(user)}


@router.get("/admin-all-users", status_code=201)
def admin_all_users(admin: dict = Depends(get_admin)):
    users = get_documents("user", {}, sort=[("created_at", -1)])
    return {"success": True, "users": [serialize(u) for u in users]}


@router.delete("/delete-user/{user_id}", status_code=201)
def delete_user(user_id: str, admin: dict = Depends(get_admin)):
    oid = to_obj_id(user_id)
    if not db["user"].find_one({"_id": oid}):
        raise HTTPException(status_code=400, detail="User is not available with this id")
    db["user"].delete_one({"_id": oid})
    db["session"].delete_many({"owner_id": user_id, "kind": "user"})
    logger.info("Admin %s deleted user %s", admin["_id"], user_id)
    return {"success": True, "message": "User deleted successfully!"}
