"""
Database Schemas for the Multi-vendor Marketplace

Each Pydantic model represents a collection in MongoDB. The collection name is the lowercase of the class name.

Collections:
- user
- shop
- product
- event
- order
- couponcode
- conversation
- message
- withdraw

Nested models (Address, Review, CartLine, ...) are embedded in their parent document.
"""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional


class Address(BaseModel):
    id: Optional[str] = Field(None, description="Address id, assigned on insert")
    country: str = Field(..., description="Country")
    city: str = Field(..., description="City")
    address1: str = Field(..., description="Street line 1")
    address2: Optional[str] = Field(None, description="Street line 2")
    zip_code: Optional[str] = Field(None, description="Postal code")
    address_type: str = Field(..., description="Label, e.g. Home or Office; unique per user")


class User(BaseModel):
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Email address (lowercased)")
    password_hash: str = Field(..., description="bcrypt hash")
    avatar: Optional[str] = Field(None, description="Avatar image URL")
    phone_number: Optional[str] = Field(None, description="Phone number")
    addresses: List[Address] = Field(default_factory=list, description="Saved shipping addresses")
    role: str = Field("user", description="user or admin")


class Transaction(BaseModel):
    id: str = Field(..., description="Withdraw id that produced this payout")
    amount: float = Field(..., gt=0)
    status: str = Field(..., description="Withdraw status at payout time")
    updated_at: Optional[datetime] = None


class Shop(BaseModel):
    name: str = Field(..., description="Shop name")
    email: str = Field(..., description="Contact email (lowercased)")
    password_hash: str = Field(..., description="bcrypt hash")
    description: Optional[str] = Field(None, description="Shop description")
    address: str = Field(..., description="Shop address")
    phone_number: str = Field(..., description="Phone number")
    zip_code: str = Field(..., description="Postal code")
    avatar: Optional[str] = Field(None, description="Logo image URL")
    role: str = Field("Seller")
    available_balance: float = Field(0, ge=0, description="Withdrawable earnings")
    withdraw_method: Optional[dict] = Field(None, description="Bank details for payouts")
    transactions: List[Transaction] = Field(default_factory=list, description="Completed payouts")


class Review(BaseModel):
    user: dict = Field(..., description="Reviewer snapshot {id, name, avatar}")
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    product_id: str = Field(...)
    created_at: Optional[datetime] = None


class Product(BaseModel):
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Product description")
    category: str = Field(..., description="Product category")
    tags: Optional[str] = Field(None, description="Comma separated search tags")
    original_price: Optional[float] = Field(None, ge=0, description="List price")
    discount_price: float = Field(..., ge=0, description="Selling price")
    stock: int = Field(..., ge=0, description="Units in stock")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    shop_id: str = Field(..., description="Owning shop id")
    shop: dict = Field(..., description="Shop snapshot at creation time")
    sold_out: int = Field(0, ge=0, description="Units sold")
    reviews: List[Review] = Field(default_factory=list)
    ratings: float = Field(0, ge=0, le=5, description="Mean review rating")


class Event(Product):
    start_date: datetime = Field(..., description="Event start")
    finish_date: datetime = Field(..., description="Event end")
    status: str = Field("Running")


class CouponCode(BaseModel):
    name: str = Field(..., description="Unique coupon name")
    value: float = Field(..., ge=0, le=100, description="Discount percentage")
    min_amount: Optional[float] = Field(None, ge=0)
    max_amount: Optional[float] = Field(None, ge=0)
    shop_id: str = Field(..., description="Issuing shop id")
    selected_product: Optional[str] = Field(None, description="Restrict to one product, by name or id")


class CartLine(BaseModel):
    product_id: str = Field(..., description="Product id")
    name: str = Field(..., description="Product name at purchase time")
    shop_id: str = Field(..., description="Selling shop id")
    price: float = Field(..., ge=0, description="Unit price paid")
    qty: int = Field(..., ge=1)
    image: Optional[str] = None
    is_reviewed: bool = False


class PaymentInfo(BaseModel):
    id: Optional[str] = Field(None, description="Processor reference, e.g. Stripe payment intent id")
    status: Optional[str] = None
    type: Optional[str] = Field(None, description="Credit Card, Cash On Delivery, ...")


class Order(BaseModel):
    cart: List[CartLine] = Field(..., description="Lines for a single shop")
    shipping_address: dict = Field(...)
    user: dict = Field(..., description="Buyer snapshot; user['id'] identifies the buyer")
    total_price: float = Field(..., ge=0)
    status: str = Field("Processing")
    payment_info: PaymentInfo = Field(default_factory=PaymentInfo)
    paid_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    stock_taken: bool = Field(False, description="Stock is currently held by this order")
    credited: bool = Field(False, description="The shop has been paid for this order")


class Conversation(BaseModel):
    group_title: str = Field(..., description="Unique key for a buyer/seller pair")
    members: List[str] = Field(..., description="[user_id, seller_id]")
    last_message: Optional[str] = None
    last_message_id: Optional[str] = None


class Message(BaseModel):
    conversation_id: str = Field(...)
    sender: str = Field(..., description="User or shop id of the author")
    text: str = ""
    images: Optional[str] = Field(None, description="Attached image URL")


class Withdraw(BaseModel):
    seller: dict = Field(..., description="Shop snapshot {id, name, email}")
    amount: float = Field(..., gt=0)
    status: str = Field("Processing")
