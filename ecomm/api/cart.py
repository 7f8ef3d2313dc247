from fastapi import APIRouter, Depends
from ecomm.api.deps import require_customer
from ecomm.models.schemas import CartItemIn, CartUpdateIn, CartRemoveIn
from ecomm.services import cart_service

router = APIRouter()

@router.get("")
def get_cart(user=Depends(require_customer)):
    return cart_service.get_cart(user["_id"])

@router.post("/add")
def add_to_cart(payload: CartItemIn, user=Depends(require_customer)):
    return cart_service.add_item(user["_id"], payload.itemId, payload.quantity, payload.color, payload.size)

@router.put("/update")
def update_cart_item(payload: CartUpdateIn, user=Depends(require_customer)):
    return cart_service.update_quantity(user["_id"], payload.itemId, payload.quantity, payload.color, payload.size)

# DELETE with a JSON body, as the storefront client sends it
@router.delete("/remove")
def remove_from_cart(payload: CartRemoveIn, user=Depends(require_customer)):
    return cart_service.remove_item(user["_id"], payload.itemId, payload.color, payload.size)
