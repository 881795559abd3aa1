import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from auth import get_admin, get_current_seller, get_current_user
from database import create_document, db, get_documents, now, parse_object_id, serialize
from routers import to_obj_id
from schemas import Product

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/product", tags=["products"])


class ProductCreate(BaseModel):
    name: str
    description: str
    category: str
    tags: Optional[str] = None
    original_price: Optional[float] = Field(None, ge=0)
    discount_price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    images: List[str] = []
    shop_id: str


class ReviewRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    product_id: str
    order_id: Optional[str] = None


def shop_snapshot(shop_id: str) -> dict:
    """The shop document embedded in listings; raises 400 when the id does not name a shop."""
    oid = parse_object_id(shop_id)
    shop = db["shop"].find_one({"_id": oid}) if oid else None
    if not shop:
        raise HTTPException(status_code=400, detail="Shop Id is invalid!")
    return serialize(shop)


def average_rating(reviews: List[dict]) -> float:
    if not reviews:
        return 0
    return sum(r["rating"] for r in reviews) / len(reviews)


@router.post("/create-product", status_code=201)
def create_product(payload: ProductCreate):
    product = Product(**payload.model_dump(), shop=shop_snapshot(payload.shop_id))
    product_id = create_document("product", product)
    logger.info("Shop %s created product %s", payload.shop_id, product_id)
    return {"success": True, "product": serialize(db["product"].find_one({"_id": to_obj_id(product_id)}))}


@router.get("/get-all-products-shop/{shop_id}", status_code=201)
def get_shop_products(shop_id: str):
    products = get_documents("product", {"shop_id": shop_id}, sort=[("created_at", -1)])
    return {"success": True, "products": [serialize(p) for p in products]}


@router.delete("/delete-shop-product/{product_id}", status_code=201)
def delete_shop_product(product_id: str, seller: dict = Depends(get_current_seller)):
    oid = to_obj_id(product_id)
    product = db["product"].find_one({"_id": oid})
    if not product:
        raise HTTPException(status_code=404, detail="Product is not found with this id")
    if product["shop_id"] != str(seller["_id"]):
        raise HTTPException(status_code=403, detail="You can only delete your own products")
    db["product"].delete_one({"_id": oid})
    return {"success": True, "message": "Product Deleted successfully!"}


@router.get("/get-all-products", status_code=201)
def get_all_products():
    products = get_documents("product", {}, sort=[("created_at", -1)])
    return {"success": True, "products": [serialize(p) for p in products]}


@router.put("/create-new-review")
def create_review(payload: ReviewRequest, user: dict = Depends(get_current_user)):
    product = db["product"].find_one({"_id": to_obj_id(payload.product_id)})
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    user_id = str(user["_id"])
    review = {
        "user": {"id": user_id, "name": user["name"], "avatar": user.get("avatar")},
        "rating": payload.rating,
        "comment": payload.comment,
        "product_id": payload.product_id,
        "created_at": now(),
    }
    reviews = [r for r in product.get("reviews", []) if r["user"]["id"] != user_id]
    reviews.append(review)
    db["product"].update_one(
        {"_id": product["_id"]},
        {"$set": {"reviews": reviews, "ratings": average_rating(reviews)}},
    )

    if payload.order_id:
        mark_reviewed(payload.order_id, payload.product_id)
    return {"success": True, "message": "Reviewed successfully!"}


def mark_reviewed(order_id: str, product_id: str) -> None:
    oid = parse_object_id(order_id)
    order = db["order"].find_one({"_id": oid}) if oid else None
    if not order:
        logger.warning("Review references unknown order %s", order_id)
        return
    cart = order["cart"]
    for line in cart:
        if line["product_id"] == product_id:
            line["is_reviewed"] = True
    db["order"].update_one({"_id": oid}, {"$set": {"cart": cart}})


@router.get("/admin-all-products", status_code=201)
def admin_all_products(admin: dict = Depends(get_admin)):
    products = get_documents("product", {}, sort=[("created_at", -1)])
    return {"success": True, "products": [serialize(p) for p in products]}
