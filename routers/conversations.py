from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from auth import get_current_seller, get_current_user
from database import create_document, db, get_documents, now, serialize
from routers import to_obj_id
from schemas import Conversation

router = APIRouter(prefix="/api/conversation", tags=["conversations"])

NEWEST_FIRST = [("updated_at", -1), ("created_at", -1)]


class ConversationCreate(BaseModel):
    group_title: str
    user_id: str
    seller_id: str


class LastMessageUpdate(BaseModel):
    last_message: Optional[str] = None
    last_message_id: Optional[str] = None


@router.post("/create-new-conversation", status_code=201)
def create_new_conversation(payload: ConversationCreate):
    existing = db["conversation"].find_one({"group_title": payload.group_title})
    if existing:
        return {"success": True, "conversation": serialize(existing)}
    conversation = Conversation(group_title=payload.group_title, members=[payload.user_id, payload.seller_id])
    conversation_id = create_document("conversation", conversation)
    return {"success": True, "conversation": serialize(db["conversation"].find_one({"_id": to_obj_id(conversation_id)}))}


@router.get("/get-all-conversation-seller/{seller_id}", status_code=201)
def get_seller_conversations(seller_id: str, seller: dict = Depends(get_current_seller)):
    conversations = get_documents("conversation", {"members": seller_id}, sort=NEWEST_FIRST)
    return {"success": True, "conversations": [serialize(c) for c in conversations]}


@router.get("/get-all-conversation-user/{user_id}", status_code=201)
def get_user_conversations(user_id: str, user: dict = Depends(get_current_user)):
    conversations = get_documents("conversation", {"members": user_id}, sort=NEWEST_FIRST)
    return {"success": True, "conversations": [serialize(c) for c in conversations]}


@router.put("/update-last-message/{conversation_id}", status_code=201)
def update_last_message(conversation_id: str, payload: LastMessageUpdate):
    oid = to_obj_id(conversation_id)
    changes = payload.model_dump(exclude_none=True)
    changes["updated_at"] = now()
    res = db["conversation"].update_one({"_id": oid}, {"$set": changes})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"success": True, "conversation": serialize(db["conversation"].find_one({"_id": oid}))}
