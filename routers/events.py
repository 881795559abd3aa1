from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from auth import get_admin, get_current_seller
from database import create_document, db, get_documents, serialize
from routers import to_obj_id
from routers.products import shop_snapshot
from schemas import Event

router = APIRouter(prefix="/api/event", tags=["events"])


class EventCreate(BaseModel):
    name: str
    description: str
    category: str
    tags: Optional[str] = None
    original_price: Optional[float] = Field(None, ge=0)
    discount_price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    images: List[str] = []
    shop_id: str
    start_date: datetime
    finish_date: datetime


@router.post("/create-event", status_code=201)
def create_event(payload: EventCreate):
    if payload.finish_date < payload.start_date:
        raise HTTPException(status_code=400, detail="Event finish date must be after its start date")
    event = Event(**payload.model_dump(), shop=shop_snapshot(payload.shop_id))
    event_id = create_document("event", event)
    return {"success": True, "event": serialize(db["event"].find_one({"_id": to_obj_id(event_id)}))}


@router.get("/get-all-events", status_code=201)
def get_all_events():
    events = get_documents("event", {}, sort=[("created_at", -1)])
    return {"success": True, "events": [serialize(e) for e in events]}


@router.get("/get-all-events/{shop_id}", status_code=201)
def get_shop_events(shop_id: str):
    to_obj_id(shop_id)
    events = get_documents("event", {"shop_id": shop_id}, sort=[("created_at", -1)])
    return {"success": True, "events": [serialize(e) for e in events]}


@router.delete("/delete-shop-event/{event_id}", status_code=201)
def delete_shop_event(event_id: str, seller: dict = Depends(get_current_seller)):
    oid = to_obj_id(event_id)
    event = db["event"].find_one({"_id": oid})
    if not event:
        raise HTTPException(status_code=404, detail="Event is not found with this id")
    if event["shop_id"] != str(seller["_id"]):
        raise HTTPException(status_code=403, detail="You can only delete your own events")
    db["event"].delete_one({"_id": oid})
    return {"success": True, "message": "Event Deleted successfully!"}


@router.get("/admin-all-events", status_code=201)
def admin_all_events(admin: dict = Depends(get_admin)):
    events = get_documents("event", {}, sort=[("created_at", -1)])
    return {"success": True, "events": [serialize(e) for e in events]}
