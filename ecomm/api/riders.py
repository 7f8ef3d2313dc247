from fastapi import APIRouter, Depends, status
from ecomm.api.deps import require_admin, require_rider
from ecomm.models.schemas import LoginIn, RiderCreate, RiderUpdate, RiderStatusIn, RiderLocationIn
from ecomm.services import riders_service
from ecomm.core.security import create_token
from ecomm.db.mongo import serialize_doc

router = APIRouter()

@router.post("/login")
def login(payload: LoginIn):
    rider = riders_service.authenticate(payload.email, payload.password)
    return {
        "message": "Login successful",
        "token": create_token(str(rider["_id"]), "rider"),
        "user": {"id": str(rider["_id"]), "name": rider["name"], "email": rider["email"], "role": "rider"},
    }

@router.get("/me")
def me(rider=Depends(require_rider)):
    return serialize_doc(riders_service.get_rider(rider["_id"]))

@router.put("/status")
def update_status(payload: RiderStatusIn, rider=Depends(require_rider)):
    return serialize_doc(riders_service.update_status(rider["_id"], payload.status))

@router.put("/location")
def update_location(payload: RiderLocationIn, rider=Depends(require_rider)):
    return serialize_doc(riders_service.update_location(rider["_id"], payload.coordinates))

@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_rider(payload: RiderCreate, admin=Depends(require_admin)):
    rider = riders_service.create_rider(payload.name, payload.email, payload.phone, payload.password)
    return {"message": "Rider created successfully", "rider": serialize_doc(rider)}

@router.get("/all")
def all_riders(admin=Depends(require_admin)):
    return serialize_doc(riders_service.list_riders())

@router.put("/{rider_id}")
def update_rider(rider_id: str, payload: RiderUpdate, admin=Depends(require_admin)):
    rider = riders_service.update_rider(rider_id, payload.model_dump(exclude_unset=True))
    return {"message": "Rider updated successfully", "rider": serialize_doc(rider)}
