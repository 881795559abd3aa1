import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response
from pydantic import BaseModel, EmailStr

import mailer
from auth import (
    SELLER_COOKIE, consume_activation, create_activation, create_session, discard_activation, end_session,
    get_admin, get_current_seller, hash_password, set_session_cookie, verify_password,
)
from config import FRONTEND_URL
from database import create_document, db, get_documents, serialize
from routers import to_obj_id
from schemas import Shop

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/shop", tags=["shops"])


class ShopSignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    address: str
    phone_number: str
    zip_code: str
    avatar: Optional[str] = None
    description: Optional[str] = None


class ActivationRequest(BaseModel):
    activation_token: str


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AvatarRequest(BaseModel):
    avatar: Optional[str] = None


class SellerInfoRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    zip_code: Optional[str] = None


class WithdrawMethodRequest(BaseModel):
    withdraw_method: dict


@router.post("/create-shop", status_code=201)
def create_shop(payload: ShopSignupRequest):
    email = payload.email.lower()
    if db["shop"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="User already exists")
    pending = payload.model_dump(exclude={"password"})
    pending.update({"email": email, "password_hash": hash_password(payload.password)})
    token = create_activation("seller", pending)
    activation_url = f"{FRONTEND_URL}/seller/activation/{token}"
    try:
        mailer.send_mail(
            email,
            "Activate your Shop",
            f"Hello {payload.name}, please click on the link to activate your shop: {activation_url}",
        )
    except mailer.MailDeliveryError:
        discard_activation(token)
        raise
    return {"success": True, "message": f"please check your email:- {email} to activate your shop!"}


@router.post("/activation", status_code=201)
def activate_shop(payload: ActivationRequest, response: Response):
    pending = consume_activation(payload.activation_token, "seller")
    if not pending:
        raise HTTPException(status_code=400, detail="Invalid token")
    if db["shop"].find_one({"email": pending["email"]}):
        raise HTTPException(status_code=400, detail="User already exists")
    shop_id = create_document("shop", Shop(**pending))
    logger.info("Activated shop %s", shop_id)
    token = create_session(shop_id, "seller")
    set_session_cookie(response, SELLER_COOKIE, token)
    seller = db["shop"].find_one({"_id": to_obj_id(shop_id)})
    return {"success": True, "seller": serialize(seller), "token": token}


@router.post("/login-shop", status_code=201)
def login_shop(payload: LoginRequest, response: Response):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Please provide the all fields!")
    seller = db["shop"].find_one({"email": payload.email.lower()})
    if not seller:
        raise HTTPException(status_code=400, detail="User doesn't exists!")
    if not verify_password(payload.password, seller.get("password_hash")):
        raise HTTPException(status_code=400, detail="Please provide the correct information")
    token = create_session(str(seller["_id"]), "seller")
    set_session_cookie(response, SELLER_COOKIE, token)
    return {"success": True, "seller": serialize(seller), "token": token}


@router.get("/getSeller")
def get_seller(seller: dict = Depends(get_current_seller)):
    return {"success": True, "seller": serialize(seller)}


@router.get("/logout", status_code=201)
def logout(response: Response, authorization: Optional[str] = Header(None),
           seller_token: Optional[str] = Cookie(None)):
    if authorization and authorization.startswith("Bearer "):
        seller_token = authorization.split(" ", 1)[1]
    end_session(seller_token)
    response.delete_cookie(SELLER_COOKIE)
    return {"success": True, "message": "Log out successful!"}


@router.get("/get-shop-info/{shop_id}", status_code=201)
def get_shop_info(shop_id: str):
    shop = db["shop"].find_one({"_id": to_obj_id(shop_id)})
    if not shop:
        raise HTTPException(status_code=404, detail="Shop not found")
    return {"success": True, "shop": serialize(shop)}


@router.put("/update-shop-avatar")
def update_shop_avatar(payload: AvatarRequest, seller: dict = Depends(get_current_seller)):
    if payload.avatar:
        db["shop"].update_one({"_id": seller["_id"]}, {"$set": {"avatar": payload.avatar}})
    return {"success": True, "seller": serialize(db["shop"].find_one({"_id": seller["_id"]}))}


@router.put("/update-seller-info", status_code=201)
def update_seller_info(payload: SellerInfoRequest, seller: dict = Depends(get_current_seller)):
    update = payload.model_dump(exclude_none=True)
    if update:
        db["shop"].update_one({"_id": seller["_id"]}, {"$set": update})
    shop = db["shop"].find_one({"_id": seller["_id"]})
    if not shop:
        raise HTTPException(status_code=400, detail="User not found")
    return {"success": True, "shop": serialize(shop)}


@router.get("/admin-all-sellers", status_code=201)
def admin_all_sellers(admin: dict = Depends(get_admin)):
    sellers = get_documents("shop", {}, sort=[("created_at", -1)])
    return {"success": True, "sellers": [serialize(s) for s in sellers]}


@router.delete("/delete-seller/{seller_id}", status_code=201)
def delete_seller(seller_id: str, admin: dict = Depends(get_admin)):
    oid = to_obj_id(seller_id)
    if not db["shop"].find_one({"_id": oid}):
        raise HTTPException(status_code=400, detail="Seller is not available with this id")
    db["shop"].delete_one({"_id": oid})
    db["session"].delete_many({"owner_id": seller_id, "kind": "seller"})
    logger.info("Admin %s deleted seller %s", admin["_id"], seller_id)
    return {"success": True, "message": "Seller deleted successfully!"}


@router.put("/update-payment-methods", status_code=201)
def update_payment_methods(payload: WithdrawMethodRequest, seller: dict = Depends(get_current_seller)):
    db["shop"].update_one({"_id": seller["_id"]}, {"$set": {"withdraw_method": payload.withdraw_method}})
    return {"success": True, "seller": serialize(db["shop"].find_one({"_id": seller["_id"]}))}


@router.delete("/delete-withdraw-method", status_code=201)
def delete_withdraw_method(seller: dict = Depends(get_current_seller)):
    res = db["shop"].update_one({"_id": seller["_id"]}, {"$set": {"withdraw_method": None}})
    if res.matched_count == 0:
        raise HTTPException(status_code=400, detail="Seller not found with this id")
    return {"success": True, "seller": serialize(db["shop"].find_one({"_id": seller["_id"]}))}
