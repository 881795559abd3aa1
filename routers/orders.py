import logging
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from auth import get_admin, get_current_seller, get_current_user
from config import SERVICE_CHARGE
from database import create_document, db, get_documents, now, parse_object_id, serialize
from routers import to_obj_id
from schemas import CartLine, Order, PaymentInfo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/order", tags=["orders"])

TRANSFERRED = "Transferred to delivery partner"
DELIVERED = "Delivered"
REFUND_SUCCESS = "Refund Success"


class OrderCreate(BaseModel):
    cart: List[CartLine]
    shipping_address: dict
    user: dict
    total_price: Optional[float] = Field(None, ge=0)
    payment_info: PaymentInfo = PaymentInfo()


class StatusUpdate(BaseModel):
    status: str


class RefundRequest(BaseModel):
    status: Literal["Processing Refund"] = "Processing Refund"


def split_by_shop(cart: List[CartLine]) -> Dict[str, List[CartLine]]:
    groups: Dict[str, List[CartLine]] = {}
    for line in cart:
        groups.setdefault(line.shop_id, []).append(line)
    return groups


def line_total(lines) -> float:
    return sum(line.price * line.qty for line in lines)


def find_order(order_id: str) -> dict:
    order = db["order"].find_one({"_id": to_obj_id(order_id)})
    if not order:
        raise HTTPException(status_code=400, detail="Order not found with this id")
    return order


def order_shop_id(order: dict) -> Optional[str]:
    return order["cart"][0]["shop_id"] if order.get("cart") else None


def claim(order: dict, flag: str) -> bool:
    """Atomically set a one-shot flag on the order; False when another request already set it."""
    return db["order"].find_one_and_update(
        {"_id": order["_id"], flag: {"$ne": True}},
        {"$set": {flag: True}},
    ) is not None


def take_stock(order: dict) -> None:
    """Move every line's quantity from stock to sold_out, once per order; refuses before writing if any line is short."""
    if order.get("stock_taken"):
        return
    for line in order["cart"]:
        product = db["product"].find_one({"_id": parse_object_id(line["product_id"])})
        if product and product["stock"] < line["qty"]:
            raise HTTPException(status_code=400, detail=f"Insufficient stock for {product['name']}")
    if not claim(order, "stock_taken"):
        return
    for line in order["cart"]:
        res = db["product"].update_one(
            {"_id": parse_object_id(line["product_id"]), "stock": {"$gte": line["qty"]}},
            {"$inc": {"stock": -line["qty"], "sold_out": line["qty"]}},
        )
        if res.matched_count == 0:
            logger.warning("Stock not taken for product %s on order %s", line["product_id"], order["_id"])


def restore_stock(order: dict) -> bool:
    """Give back the stock taken for this order; a no-op when none is held."""
    released = db["order"].find_one_and_update(
        {"_id": order["_id"], "stock_taken": True},
        {"$set": {"stock_taken": False}},
    )
    if released is None:
        return False
    for line in order["cart"]:
        db["product"].update_one(
            {"_id": parse_object_id(line["product_id"]), "sold_out": {"$gte": line["qty"]}},
            {"$inc": {"stock": line["qty"], "sold_out": -line["qty"]}},
        )
    return True


def credit_shop(order: dict, shop_id) -> bool:
    if not claim(order, "credited"):
        return False
    credit = round(order["total_price"] * (1 - SERVICE_CHARGE), 2)
    db["shop"].update_one({"_id": shop_id}, {"$inc": {"available_balance": credit}})
    logger.info("Credited shop %s with %s for order %s", shop_id, credit, order["_id"])
    return True


@router.post("/create-order", status_code=201)
def create_order(payload: OrderCreate):
    if not payload.user.get("id"):
        raise HTTPException(status_code=400, detail="user: id is required")

    cart_total = line_total(payload.cart)
    paid = payload.total_price if payload.total_price is not None else cart_total
    orders = []
    for shop_id, lines in split_by_shop(payload.cart).items():
        subtotal = line_total(lines)
        share = subtotal * paid / cart_total if cart_total else 0
        order = Order(
            cart=lines,
            shipping_address=payload.shipping_address,
            user=payload.user,
            total_price=round(share, 2),
            payment_info=payload.payment_info,
            paid_at=now() if payload.payment_info.id else None,
        )
        order_id = create_document("order", order)
        orders.append(serialize(db["order"].find_one({"_id": to_obj_id(order_id)})))
        logger.info("Created order %s for shop %s", order_id, shop_id)
    return {"success": True, "orders": orders}


@router.get("/get-all-orders/{user_id}")
def get_user_orders(user_id: str):
    orders = get_documents("order", {"user.id": user_id}, sort=[("created_at", -1)])
    return {"success": True, "orders": [serialize(o) for o in orders]}


@router.get("/get-seller-all-orders/{shop_id}")
def get_seller_orders(shop_id: str):
    orders = get_documents("order", {"cart.shop_id": shop_id}, sort=[("created_at", -1)])
    return {"success": True, "orders": [serialize(o) for o in orders]}


@router.put("/update-order-status/{order_id}")
def update_order_status(order_id: str, payload: StatusUpdate, seller: dict = Depends(get_current_seller)):
    order = find_order(order_id)
    shop_id = order_shop_id(order)
    if shop_id != str(seller["_id"]):
        raise HTTPException(status_code=403, detail="This order belongs to another shop")

    changes = {"status": payload.status}
    if payload.status == TRANSFERRED:
        take_stock(order)
    elif payload.status == DELIVERED and credit_shop(order, seller["_id"]):
        changes["delivered_at"] = now()
        changes["payment_info.status"] = "Succeeded"

    db["order"].update_one({"_id": order["_id"]}, {"$set": changes})
    return {"success": True, "order": serialize(db["order"].find_one({"_id": order["_id"]}))}


@router.put("/order-refund/{order_id}")
def order_refund(order_id: str, payload: RefundRequest, user: dict = Depends(get_current_user)):
    order = find_order(order_id)
    if order["user"].get("id") != str(user["_id"]):
        raise HTTPException(status_code=403, detail="This order belongs to another user")
    db["order"].update_one({"_id": order["_id"]}, {"$set": {"status": payload.status}})
    return {
        "success": True,
        "order": serialize(db["order"].find_one({"_id": order["_id"]})),
        "message": "Order Refund Request successfully!",
    }


@router.put("/order-refund-success/{order_id}")
def order_refund_success(order_id: str, payload: StatusUpdate, seller: dict = Depends(get_current_seller)):
    order = find_order(order_id)
    if order_shop_id(order) != str(seller["_id"]):
        raise HTTPException(status_code=403, detail="This order belongs to another shop")
    db["order"].update_one({"_id": order["_id"]}, {"$set": {"status": payload.status}})
    if payload.status == REFUND_SUCCESS and restore_stock(order):
        logger.info("Refunded order %s, stock restored", order_id)
    return {"success": True, "message": "Order Refund successful!"}


def _admin_sort_key(order: dict):
    # Delivered orders first (latest delivery first), then by creation date.
    floor = datetime.min
    delivered = order.get("delivered_at")
    return (
        delivered is not None,
        _naive(delivered) if delivered else floor,
        _naive(order.get("created_at")) if order.get("created_at") else floor,
    )


def _naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@router.get("/admin-all-orders", status_code=201)
def admin_all_orders(admin: dict = Depends(get_admin)):
    orders = sorted(get_documents("order", {}), key=_admin_sort_key, reverse=True)
    return {"success": True, "orders": [serialize(o) for o in orders]}
