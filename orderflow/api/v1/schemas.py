import uuid
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional
from orderflow.domain.order import OrderStatus
from orderflow.domain.product import MAX_AMOUNT, MAX_QUANTITY

class RegisterUserPayload(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    age: int = Field(le=MAX_QUANTITY)
    is_married: Optional[bool] = False
    password: str

class UserRead(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    full_name: str
    age: int
    is_married: bool
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True

class ProductCreate(BaseModel):
    description: str
    tags: List[str] = []
    quantity: int = Field(default=0, le=MAX_QUANTITY)
    price: int = Field(le=MAX_AMOUNT)

class ProductUpdate(BaseModel):
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    quantity: Optional[int] = Field(default=None, le=MAX_QUANTITY)
    price: Optional[int] = Field(default=None, le=MAX_AMOUNT)

class ProductRead(BaseModel):
    id: uuid.UUID
    description: str
    tags: List[str]
    quantity: int
    price: int
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True

class ProductList(BaseModel):
    products: List[ProductRead]
    total: int
    limit: int
    offset: int

class OrderItemCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(ge=1, le=MAX_QUANTITY)

class OrderCreate(BaseModel):
    user_id: uuid.UUID
    items: List[OrderItemCreate]

class ProductSnapshotRead(BaseModel):
    id: uuid.UUID
    description: str
    tags: List[str]
    price: int
    class Config: from_attributes = True

class OrderItemRead(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    product_snapshot: ProductSnapshotRead
    quantity: int
    price_per_item: int
    total: int
    created_at: datetime
    class Config: from_attributes = True

class OrderRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    status: OrderStatus
    total: int
    items: List[OrderItemRead]
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True

class OrderList(BaseModel):
    orders: List[OrderRead]
    total: int
    limit: int
    offset: int

class ErrorBody(BaseModel):
    error: str
    message: str
    code: str
