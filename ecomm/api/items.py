from fastapi import APIRouter, Depends, status
from ecomm.api.deps import require_admin
from ecomm.models.schemas import ItemIn, ItemUpdate
from ecomm.services import items_service
from ecomm.db.mongo import serialize_doc

router = APIRouter()

@router.get("")
def list_items():
    return [serialize_doc(i) for i in items_service.list_items()]

@router.get("/{item_id}")
def get_item(item_id: str):
    return serialize_doc(items_service.get_item(item_id))

@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_item(payload: ItemIn, admin=Depends(require_admin)):
    item = items_service.create_item(payload.model_dump())
    return {"message": "Item created successfully", "item": serialize_doc(item)}

@router.put("/{item_id}")
def update_item(item_id: str, payload: ItemUpdate, admin=Depends(require_admin)):
    item = items_service.update_item(item_id, payload.model_dump(exclude_unset=True))
    return {"message": "Item updated successfully", "item": serialize_doc(item)}

@router.delete("/{item_id}")
def delete_item(item_id: str, admin=Depends(require_admin)):
    items_service.delete_item(item_id)
    return {"deleted": True}
