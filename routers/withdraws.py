import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

import mailer
from auth import get_admin, get_current_seller
from database import create_document, db, get_documents, now, serialize
from routers import to_obj_id
from schemas import Withdraw

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/withdraw", tags=["withdraws"])


class WithdrawRequest(BaseModel):
    amount: float


class WithdrawApproval(BaseModel):
    seller_id: str


@router.post("/create-withdraw-request", status_code=201)
def create_withdraw_request(payload: WithdrawRequest, seller: dict = Depends(get_current_seller)):
    amount = payload.amount
    if amount <= 0:
        raise HTTPException(status_code=400, detail="Invalid withdraw amount")
    shop = db["shop"].find_one({"_id": seller["_id"]})
    if not shop:
        raise HTTPException(status_code=400, detail="Seller not found")
    if shop.get("available_balance", 0) < amount:
        raise HTTPException(status_code=400, detail="Insufficient balance")

    mailer.send_mail(
        shop["email"],
        "Withdraw Request",
        f"Hello {shop['name']}, Your withdraw request of {amount}$ is processing. "
        f"It will take 3days to 7days to processing! ",
    )

    debited = db["shop"].update_one(
        {"_id": shop["_id"], "available_balance": {"$gte": amount}},
        {"$inc": {"available_balance": -amount}},
    )
    if debited.modified_count == 0:
        raise HTTPException(status_code=400, detail="Insufficient balance")

    withdraw = Withdraw(
        seller={"id": str(shop["_id"]), "name": shop["name"], "email": shop["email"]},
        amount=amount,
    )
    withdraw_id = create_document("withdraw", withdraw)
    logger.info("Shop %s requested withdraw %s of %s", shop["_id"], withdraw_id, amount)
    return {"success": True, "withdraw": serialize(db["withdraw"].find_one({"_id": to_obj_id(withdraw_id)}))}


@router.get("/get-all-withdraw-request", status_code=201)
def get_all_withdraw_requests(admin: dict = Depends(get_admin)):
    withdraws = get_documents("withdraw", {}, sort=[("created_at", -1)])
    return {"success": True, "withdraws": [serialize(w) for w in withdraws]}


@router.put("/update-withdraw-request/{withdraw_id}", status_code=201)
def update_withdraw_request(withdraw_id: str, payload: WithdrawApproval, admin: dict = Depends(get_admin)):
    oid = to_obj_id(withdraw_id)
    withdraw = db["withdraw"].find_one({"_id": oid})
    if not withdraw:
        raise HTTPException(status_code=404, detail="Withdraw not found")
    seller = db["shop"].find_one({"_id": to_obj_id(payload.seller_id)})
    if not seller:
        raise HTTPException(status_code=404, detail="Seller not found")

    stamp = now()
    approved = db["withdraw"].update_one(
        {"_id": oid, "status": "Processing"},
        {"$set": {"status": "succeed", "updated_at": stamp}},
    )
    if approved.matched_count == 0:
        raise HTTPException(status_code=400, detail="Withdraw request already processed")
    transaction = {"id": withdraw_id, "amount": withdraw["amount"], "updated_at": stamp, "status": "succeed"}
    db["shop"].update_one({"_id": seller["_id"]}, {"$push": {"transactions": transaction}})

    mailer.send_mail(
        seller["email"],
        "Payment confirmation",
        f"Hello {seller['name']}, Your withdraw request of {withdraw['amount']}$ is on the way. "
        f"Delivery time depends on your bank's rules it usually takes 3days to 7days.",
    )
    return {"success": True, "withdraw": serialize(db["withdraw"].find_one({"_id": oid}))}
