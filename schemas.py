"""
Database Schemas for the storefront

Each Pydantic model represents a MongoDB collection.
Collection name is the snake_case of the class name.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field, EmailStr

Role = Literal["customer", "admin"]
OrderStatus = Literal["pending", "processing", "shipped", "completed", "cancelled"]
PaymentMethod = Literal["card", "upi", "wallet"]

class User(BaseModel):
    email: EmailStr
    password_hash: str

class Profile(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: Role = "customer"
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = "India"

class Product(BaseModel):
    name: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    stock_quantity: int = Field(0, ge=0)
    sold_count: int = Field(0, ge=0)
    category: str
    sku: str
    image_url: Optional[str] = None
    is_featured: bool = False

class CartItem(BaseModel):
    user_id: str
    product_id: str
    quantity: int = Field(..., ge=1)

class Order(BaseModel):
    user_id: str
    order_number: str
    total_amount: float = Field(..., ge=0)
    status: OrderStatus = "pending"
    shipping_name: str
    shipping_phone: str
    shipping_address: str
    payment_method: PaymentMethod = "card"

class OrderItem(BaseModel):
    """Snapshot of a product at purchase time"""
    order_id: str
    product_id: str
    product_name: str
    product_sku: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)

class Review(BaseModel):
    product_id: str
    user_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None

class BlogPost(BaseModel):
    title: str
    content: str
    image_url: Optional[str] = None
    published: bool = False
    author_id: Optional[str] = None
