from fastapi import HTTPException
from bson import ObjectId

from database import parse_object_id


def to_obj_id(id_str: str) -> ObjectId:
    oid = parse_object_id(id_str)
    if oid is None:
        raise HTTPException(status_code=400, detail="Invalid id")
    return oid
