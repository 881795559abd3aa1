import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from auth import get_current_seller
from database import create_document, db, get_documents, serialize
from routers import to_obj_id
from schemas import CartLine, CouponCode

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/coupon", tags=["coupons"])


class CouponCreate(BaseModel):
    name: str = Field(..., min_length=1)
    value: float = Field(..., ge=0, le=100)
    min_amount: Optional[float] = Field(None, ge=0)
    max_amount: Optional[float] = Field(None, ge=0)
    selected_product: Optional[str] = None


class ApplyCouponRequest(BaseModel):
    name: str
    cart: List[CartLine]


def coupon_discount(coupon: dict, cart: List[CartLine]) -> dict:
    """Price the coupon against a cart: only the issuing shop's lines (and selected product) count."""
    eligible = [line for line in cart if line.shop_id == coupon["shop_id"]]
    selected = coupon.get("selected_product")
    if selected:
        eligible = [line for line in eligible if selected in (line.name, line.product_id)]
    if not eligible:
        raise HTTPException(status_code=400, detail="Coupon code is not valid for this shop")

    subtotal = sum(line.price * line.qty for line in eligible)
    min_amount = coupon.get("min_amount") or 0
    max_amount = coupon.get("max_amount")
    if subtotal < min_amount or (max_amount is not None and subtotal > max_amount):
        raise HTTPException(status_code=400, detail="Coupon code is not applicable to this order amount")

    return {
        "eligible_price": round(subtotal, 2),
        "discount": round(subtotal * coupon["value"] / 100, 2),
    }


@router.post("/create-coupon-code", status_code=201)
def create_coupon_code(payload: CouponCreate, seller: dict = Depends(get_current_seller)):
    if db["couponcode"].find_one({"name": payload.name}):
        raise HTTPException(status_code=400, detail="Coupon code already exists!")
    coupon = CouponCode(**payload.model_dump(), shop_id=str(seller["_id"]))
    coupon_id = create_document("couponcode", coupon)
    logger.info("Shop %s created coupon %s", seller["_id"], payload.name)
    return {"success": True, "coupon_code": serialize(db["couponcode"].find_one({"_id": to_obj_id(coupon_id)}))}


@router.get("/get-coupon/{shop_id}", status_code=201)
def get_shop_coupons(shop_id: str, seller: dict = Depends(get_current_seller)):
    # Sellers only ever see their own coupons, whatever id is in the path.
    coupons = get_documents("couponcode", {"shop_id": str(seller["_id"])}, sort=[("created_at", -1)])
    return {"success": True, "coupon_codes": [serialize(c) for c in coupons]}


@router.delete("/delete-coupon/{coupon_id}", status_code=201)
def delete_coupon(coupon_id: str, seller: dict = Depends(get_current_seller)):
    res = db["couponcode"].delete_one({"_id": to_obj_id(coupon_id), "shop_id": str(seller["_id"])})
    if res.deleted_count == 0:
        raise HTTPException(status_code=400, detail="Coupon code doesn't exists!")
    return {"success": True, "message": "Coupon code deleted successfully!"}


@router.get("/get-coupon-value/{name}")
def get_coupon_value(name: str):
    coupon = db["couponcode"].find_one({"name": name})
    return {"success": True, "coupon_code": serialize(coupon)}


@router.post("/apply-coupon")
def apply_coupon(payload: ApplyCouponRequest):
    coupon = db["couponcode"].find_one({"name": payload.name})
    if not coupon:
        raise HTTPException(status_code=400, detail="Coupon code doesn't exists!")
    return {"success": True, "name": coupon["name"], **coupon_discount(coupon, payload.cart)}
