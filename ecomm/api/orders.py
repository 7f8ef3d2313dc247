from fastapi import APIRouter, Depends, status
from ecomm.api.deps import get_current_user, require_admin, require_customer, require_rider
from ecomm.models.schemas import OrderCreate, OrderStatusUpdate, DeliveryStatusUpdate
from ecomm.services import orders_service
from ecomm.db.mongo import serialize_doc

router = APIRouter()

@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, user=Depends(require_customer)):
    items = [i.model_dump() for i in payload.items] if payload.items else None
    order = orders_service.create_order(user["_id"], payload.customerInfo.model_dump(), items)
    return serialize_doc(order)

@router.get("/my-orders")
def my_orders(user=Depends(require_customer)):
    orders = orders_service.list_orders(user_id=user["_id"])
    return serialize_doc(orders_service.attach_parties(orders))

@router.get("/all")
def all_orders(admin=Depends(require_admin)):
    orders = orders_service.list_orders()
    return serialize_doc(orders_service.attach_parties(orders, include_user=True))

@router.put("/status")
def update_order_status(payload: OrderStatusUpdate, admin=Depends(require_admin)):
    order = orders_service.update_order_status(payload.orderId, payload.status, payload.riderId)
    return serialize_doc(order)

@router.get("/rider-orders")
def rider_orders(rider=Depends(require_rider)):
    orders = orders_service.list_orders(rider_id=rider["_id"])
    return serialize_doc(orders_service.attach_parties(orders, include_user=True))

@router.put("/delivery-status")
def update_delivery_status(payload: DeliveryStatusUpdate, rider=Depends(require_rider)):
    order = orders_service.update_delivery_status(payload.orderId, payload.status, rider["_id"])
    return serialize_doc(order)

# declared last so the fixed paths above win
@router.get("/{order_id}")
def get_order(order_id: str, user=Depends(get_current_user)):
    order = orders_service.get_order_for(order_id, user["_id"], user["role"])
    orders_service.attach_parties([order], include_user=user["role"] != "user")
    return serialize_doc(order)
