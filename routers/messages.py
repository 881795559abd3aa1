from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from database import create_document, db, get_documents, serialize
from routers import to_obj_id
from schemas import Message

router = APIRouter(prefix="/api/message", tags=["messages"])


class MessageCreate(BaseModel):
    conversation_id: str
    sender: str
    text: Optional[str] = None
    images: Optional[str] = None


@router.post("/create-new-message", status_code=201)
def create_new_message(payload: MessageCreate):
    message = Message(
        conversation_id=payload.conversation_id,
        sender=payload.sender,
        text=payload.text or "",
        images=payload.images,
    )
    message_id = create_document("message", message)
    return {"success": True, "message": serialize(db["message"].find_one({"_id": to_obj_id(message_id)}))}


@router.get("/get-all-messages/{conversation_id}", status_code=201)
def get_all_messages(conversation_id: str):
    messages = get_documents("message", {"conversation_id": conversation_id}, sort=[("created_at", 1)])
    return {"success": True, "messages": [serialize(m) for m in messages]}
