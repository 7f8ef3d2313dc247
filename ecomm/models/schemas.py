from pydantic import BaseModel, EmailStr, Field
from typing import Any, List, Optional

# Auth
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)

class AdminCreate(UserCreate):
    adminSecret: str

class LoginIn(BaseModel):
    email: EmailStr
    password: str

class UserInfo(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: str

class TokenOut(BaseModel):
    message: str
    token: str
    user: UserInfo

# Items
class Variation(BaseModel):
    color: str
    size: str
    stock: int = Field(0, ge=0)

class ItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    image: Optional[str] = None
    stock: int = Field(0, ge=0)
    variations: List[Variation] = []

class ItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    variations: Optional[List[Variation]] = None

# Cart
class CartItemIn(BaseModel):
    itemId: str
    quantity: int = Field(1, ge=1)
    color: Optional[str] = None
    size: Optional[str] = None

class CartUpdateIn(BaseModel):
    itemId: str
    quantity: int
    color: Optional[str] = None
    size: Optional[str] = None

class CartRemoveIn(BaseModel):
    itemId: str
    color: Optional[str] = None
    size: Optional[str] = None

# Orders
class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipCode: Optional[str] = None
    country: Optional[str] = None

class CustomerInfo(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    address: Address = Address()

class OrderItemIn(BaseModel):
    itemId: str
    quantity: int = Field(..., ge=1)
    color: Optional[str] = None
    size: Optional[str] = None

class OrderCreate(BaseModel):
    customerInfo: CustomerInfo
    items: Optional[List[OrderItemIn]] = None

class OrderStatusUpdate(BaseModel):
    orderId: str
    status: str
    riderId: Optional[str] = None

class DeliveryStatusUpdate(BaseModel):
    orderId: str
    status: str

# Riders
class RiderCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)

class RiderUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=6)
    status: Optional[str] = None

class RiderStatusIn(BaseModel):
    status: str

class RiderLocationIn(BaseModel):
    # validated by the riders service so malformed pairs get a 400 "Invalid coordinates"
    coordinates: Any = None
