import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, Request, Response, UploadFile, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import admin
import cart
import catalog
import checkout
import config
import database
from auth import (
    close_session,
    get_current_user,
    get_optional_user,
    hash_password,
    is_admin,
    open_session,
    require_admin,
    verify_password,
)
from database import (
    create_document,
    delete_document,
    ensure_indexes,
    get_db,
    get_document,
    get_documents,
    now,
    serialize,
    to_object_id,
    update_document,
)
from logger import configure_logging, log_error, log_event, log_warning
from migrate_images import migrate_images
from schemas import BlogPost, OrderStatus, PaymentMethod, Product, Profile, Review, User
from storage import PUBLIC_PREFIX, StorageError, bucket


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if database.db is not None:
        ensure_indexes(database.db)
    log_event(f"{config.BRAND_NAME} storefront API started")
    yield


# FastAPI app
app = FastAPI(title="Yarn Yantra Storefront API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def not_found_view(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        log_warning(f"404 Error: User attempted to access non-existent route: {request.url.path}")
        return JSONResponse(
            status_code=404,
            content={"detail": "Oops! Page not found", "path": request.url.path, "home": "/"},
        )
    return await http_exception_handler(request, exc)


@app.exception_handler(PyMongoError)
async def backend_error(request: Request, exc: PyMongoError):
    log_error(f"Backend call failed on {request.method} {request.url.path}", exc)
    return JSONResponse(status_code=500, content={"detail": "Operation failed"})


# Pydantic models
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)

class CartItemUpdate(BaseModel):
    quantity: int

class ShippingDetails(BaseModel):
    name: str = ""
    phone: str = ""
    address_line_1: str = ""
    address_line_2: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""

class PlaceOrderRequest(BaseModel):
    shipping: ShippingDetails
    payment_method: PaymentMethod = "card"

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None

class ProductCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    stock_quantity: int = Field(..., ge=0)
    category: str
    sku: str
    image_url: Optional[str] = None
    is_featured: bool = False

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    is_featured: Optional[bool] = None

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    published: bool = False

class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    published: Optional[bool] = None


def _redirect(location: str, detail: str):
    return HTTPException(status_code=status.HTTP_303_SEE_OTHER, detail=detail, headers={"Location": location})


def _get_or_404(db, collection: str, doc_id: str, detail: str) -> Dict[str, Any]:
    doc = get_document(db, collection, doc_id)
    if not doc:
        raise HTTPException(status_code=404, detail=detail)
    return doc


def _public_profile(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k != "session_id"}


# Auth
@app.post("/api/auth/register", status_code=201)
def register(payload: RegisterRequest, db=Depends(get_db)):
    email = payload.email.lower()
    if db["user"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="Email already in use")
    user = User(email=email, password_hash=hash_password(payload.password))
    try:
        user_id = create_document(db, "user", user)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already in use")
    profile = Profile(email=email, full_name=(payload.full_name or "").strip() or None)
    try:
        db["profile"].insert_one({"_id": to_object_id(user_id), **profile.model_dump(), "created_at": now(), "updated_at": now()})
    except PyMongoError:
        # Every user row has a profile row
        delete_document(db, "user", user_id)
        raise
    log_event(f"Auth: registered {email}")
    return {"id": user_id, "email": email, "full_name": profile.full_name, "role": profile.role}

@app.post("/api/auth/login")
def login(payload: LoginRequest, db=Depends(get_db)):
    user = db["user"].find_one({"email": payload.email.lower()})
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Incorrect email or password")
    user_id = str(user["_id"])
    access_token = open_session(db, user_id)
    profile = serialize(db["profile"].find_one({"_id": user["_id"]}))
    log_event(f"Auth: {user['email']} signed in")
    return {"access_token": access_token, "token_type": "bearer", "user": profile}

@app.post("/api/auth/logout")
def logout(current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    close_session(db, current_user["session_id"])
    return {"success": True}

@app.get("/api/auth/session")
def session(current_user: Optional[dict] = Depends(get_optional_user)):
    return {"user": _public_profile(current_user) if current_user else None}


# Navigation shell
@app.get("/api/nav")
def nav(current_user: Optional[dict] = Depends(get_optional_user), db=Depends(get_db)):
    links = [
        {"label": "Home", "path": "/"},
        {"label": "Shop", "path": "/shop"},
        {"label": "Gallery", "path": "/gallery"},
        {"label": "About", "path": "/about"},
        {"label": "Blog", "path": "/blog"},
    ]
    admin_user = is_admin(current_user)
    if admin_user:
        links.append({"label": "Admin", "path": "/admin"})
    return {
        "brand": config.BRAND_NAME,
        "user": (
            {"id": current_user["id"], "email": current_user["email"], "full_name": current_user.get("full_name")}
            if current_user else None
        ),
        "cart_count": cart.cart_count(db, current_user["id"]) if current_user else 0,
        "is_admin": admin_user,
        "links": links,
    }


# Catalog
@app.get("/api/products")
def list_products(
    q: Optional[str] = None,
    category: Optional[str] = None,
    price: str = "all",
    sort: str = "popularity",
    db=Depends(get_db),
):
    if price not in catalog.PRICE_RANGES:
        raise HTTPException(status_code=400, detail=f"Unknown price range: {price}")
    if sort not in catalog.SORT_OPTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown sort: {sort}")
    snapshot = get_documents(db, "product", {"stock_quantity": {"$gt": 0}})
    items = catalog.browse(snapshot, q=q, category=category, price=price, sort=sort)
    return {"items": items, "total": len(items)}

@app.get("/api/products/featured")
def featured_products(db=Depends(get_db)):
    items = get_documents(db, "product", {"is_featured": True}, limit=config.FEATURED_LIMIT)
    return {"items": [catalog.with_badges(p) for p in items]}

@app.get("/api/categories")
def get_categories(db=Depends(get_db)):
    return {"categories": catalog.categories(get_documents(db, "product", projection={"category": 1}))}

def _product_reviews(db, product_id: str) -> List[Dict[str, Any]]:
    reviews = get_documents(db, "review", {"product_id": product_id}, sort=[("created_at", -1)])
    author_ids = [oid for oid in (to_object_id(r["user_id"]) for r in reviews) if oid is not None]
    names = {str(p["_id"]): p.get("full_name") for p in db["profile"].find({"_id": {"$in": author_ids}})}
    for r in reviews:
        r["profiles"] = {"full_name": names.get(r["user_id"])}
    return reviews

@app.get("/api/products/{product_id}")
def get_product(product_id: str, db=Depends(get_db)):
    product = _get_or_404(db, "product", product_id, "Product not found")
    reviews = _product_reviews(db, product_id)
    return {
        **catalog.with_badges(product),
        "reviews": reviews,
        "average_rating": catalog.average_rating(reviews),
        "review_count": len(reviews),
    }


# Reviews
@app.post("/api/products/{product_id}/reviews", status_code=201)
def add_review(product_id: str, body: ReviewCreate, current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    _get_or_404(db, "product", product_id, "Product not found")
    review = Review(product_id=product_id, user_id=current_user["id"], rating=body.rating, comment=body.comment)
    try:
        review_id = create_document(db, "review", review)
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="You have already reviewed this product")
    log_event(f"Review: {current_user['email']} rated product {product_id} {body.rating}/5")
    return {"id": review_id, **review.model_dump()}


# Cart
@app.get("/api/cart")
def get_cart(current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    items = cart.load_cart(db, current_user["id"])
    return {"items": items, "subtotal": cart.cart_total(items)}

@app.post("/api/cart/items")
def add_cart_item(body: CartItemCreate, current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    try:
        item = cart.add_to_cart(db, current_user["id"], body.product_id, body.quantity)
    except cart.ProductNotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    except cart.OutOfStock:
        raise HTTPException(status_code=409, detail="Out of stock")
    item["message"] = "Added to cart!" if item["created"] else "Cart updated!"
    return item

@app.patch("/api/cart/items/{item_id}")
def update_cart_item(item_id: str, body: CartItemUpdate, current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    try:
        return cart.set_quantity(db, current_user["id"], item_id, body.quantity)
    except cart.CartItemNotFound:
        raise HTTPException(status_code=404, detail="Cart item not found")

@app.delete("/api/cart/items/{item_id}")
def delete_cart_item(item_id: str, current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    try:
        cart.remove_item(db, current_user["id"], item_id)
    except cart.CartItemNotFound:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return {"success": True, "message": "Item removed from cart"}


# Checkout
@app.get("/api/checkout")
def checkout_data(current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    items = cart.load_cart(db, current_user["id"])
    if not items:
        raise _redirect("/cart", "Your cart is empty")
    profile = get_document(db, "profile", current_user["id"])
    return {
        "step": checkout.STEP_SHIPPING,
        "steps": checkout.STEP_NAMES,
        "items": items,
        "shipping": checkout.shipping_from_profile(profile),
        **checkout.summarize(items),
    }

@app.post("/api/checkout/shipping")
def checkout_shipping(body: ShippingDetails, current_user: dict = Depends(get_current_user)):
    missing = checkout.missing_shipping_fields(body.model_dump())
    if missing:
        raise HTTPException(status_code=400, detail="Please fill in all required shipping information")
    return {"step": checkout.next_step(checkout.STEP_SHIPPING, body.model_dump()), "shipping": body.model_dump()}

@app.post("/api/checkout/orders", status_code=201)
def place_order(
    body: PlaceOrderRequest,
    current_user: dict = Depends(get_current_user),
    db=Depends(get_db),
    idempotency_key: Optional[str] = Header(None),
):
    shipping = body.shipping.model_dump()
    if checkout.missing_shipping_fields(shipping):
        raise HTTPException(status_code=400, detail="Please fill in all required shipping information")
    try:
        return checkout.place_order(db, current_user["id"], shipping, body.payment_method, idempotency_key)
    except checkout.EmptyCart as e:
        raise _redirect("/cart", str(e))
    except cart.OutOfStock as e:
        raise HTTPException(status_code=409, detail=f"Not enough stock for {e.product_name}")
    except checkout.IdempotencyConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except checkout.OrderFailed as e:
        raise HTTPException(status_code=500, detail=str(e))


# Profile & orders
@app.get("/api/profile")
def get_profile(current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    profile = _get_or_404(db, "profile", current_user["id"], "Failed to load profile")
    orders = get_documents(
        db, "order", {"user_id": current_user["id"]},
        sort=[("created_at", -1)], limit=config.RECENT_ORDERS_LIMIT,
        projection={"order_number": 1, "total_amount": 1, "status": 1, "created_at": 1},
    )
    return {"profile": profile, "orders": orders}

@app.put("/api/profile")
def update_profile(body: ProfileUpdate, current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    fields = {k: (v.strip() or None) if isinstance(v, str) else v for k, v in body.model_dump(exclude_unset=True).items()}
    profile = update_document(db, "profile", current_user["id"], fields)
    if not profile:
        raise HTTPException(status_code=404, detail="Failed to update profile")
    return {"profile": profile, "message": "Profile updated successfully"}

@app.get("/api/orders")
def my_orders(current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    return {"orders": get_documents(db, "order", {"user_id": current_user["id"]}, sort=[("created_at", -1)])}

@app.get("/api/orders/{order_id}")
def order_detail(order_id: str, current_user: dict = Depends(get_current_user), db=Depends(get_db)):
    order = get_document(db, "order", order_id)
    if not order or (order["user_id"] != current_user["id"] and not is_admin(current_user)):
        raise HTTPException(status_code=404, detail="Order not found")
    order["items"] = get_documents(db, "order_item", {"order_id": order_id})
    return order


# Blog, gallery & site
@app.get("/api/blog")
def list_blog_posts(db=Depends(get_db)):
    return {"posts": get_documents(db, "blog_post", {"published": True}, sort=[("created_at", -1)])}

@app.get("/api/blog/{post_id}")
def get_blog_post(post_id: str, db=Depends(get_db)):
    post = get_document(db, "blog_post", post_id)
    if not post or not post.get("published"):
        raise HTTPException(status_code=404, detail="Post not found")
    return post

GALLERY_ITEMS = [
    {"id": 1, "title": "Cozy Winter Collection", "description": "Warm scarves and mittens perfect for the cold season", "cta": "Shop Winter Items"},
    {"id": 2, "title": "Spring Accessories", "description": "Light and colorful bags and headbands for spring", "cta": "Browse Accessories"},
    {"id": 3, "title": "Baby Collection", "description": "Soft and gentle items perfect for little ones", "cta": "Shop for Baby"},
    {"id": 4, "title": "Home Decor", "description": "Beautiful crochet pieces to brighten your space", "cta": "View Home Items"},
    {"id": 5, "title": "Custom Orders", "description": "Personalized creations made just for you", "cta": "Order Custom"},
    {"id": 6, "title": "Gift Sets", "description": "Curated bundles perfect for gifting", "cta": "See Gift Ideas"},
]

@app.get("/api/gallery")
def gallery():
    return {"items": GALLERY_ITEMS, "order_url": config.WHATSAPP_URL}

@app.get("/api/site")
def site_info():
    return {"brand": config.BRAND_NAME, "whatsapp_url": config.WHATSAPP_URL}


# Admin
@app.get("/api/admin/dashboard")
async def admin_dashboard(current_user: dict = Depends(require_admin), db=Depends(get_db)):
    return await admin.load_dashboard(db)

@app.post("/api/admin/products", status_code=201)
def create_product(body: ProductCreate, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    product = Product(**body.model_dump())
    try:
        product_id = create_document(db, "product", product)
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail=f"SKU already exists: {body.sku}")
    log_event(f"Admin: {current_user['email']} created product {body.sku}")
    return get_document(db, "product", product_id)

@app.put("/api/admin/products/{product_id}")
def update_product(product_id: str, body: ProductUpdate, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    try:
        product = update_document(db, "product", product_id, body.model_dump(exclude_none=True))
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail=f"SKU already exists: {body.sku}")
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    log_event(f"Admin: {current_user['email']} updated product {product['sku']}")
    return product

@app.delete("/api/admin/products/{product_id}")
def delete_product(product_id: str, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    if not delete_document(db, "product", product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    log_event(f"Admin: {current_user['email']} deleted product {product_id}")
    return {"success": True}

@app.get("/api/admin/orders")
def admin_orders(order_status: Optional[OrderStatus] = None, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    query = {"status": order_status} if order_status else {}
    return {"orders": get_documents(db, "order", query, sort=[("created_at", -1)])}

@app.patch("/api/admin/orders/{order_id}")
def update_order_status(order_id: str, body: OrderStatusUpdate, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    order = update_document(db, "order", order_id, {"status": body.status})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    log_event(f"Admin: order {order['order_number']} -> {body.status}")
    return order

@app.get("/api/admin/blog")
def admin_blog_posts(current_user: dict = Depends(require_admin), db=Depends(get_db)):
    return {"posts": get_documents(db, "blog_post", sort=[("created_at", -1)])}

@app.post("/api/admin/blog", status_code=201)
def create_blog_post(body: BlogPostCreate, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    post_id = create_document(db, "blog_post", BlogPost(**body.model_dump(), author_id=current_user["id"]))
    log_event(f"Admin: {current_user['email']} created post {body.title!r}")
    return get_document(db, "blog_post", post_id)

@app.put("/api/admin/blog/{post_id}")
def update_blog_post(post_id: str, body: BlogPostUpdate, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    fields = body.model_dump(exclude_none=True)
    fields["author_id"] = current_user["id"]
    post = update_document(db, "blog_post", post_id, fields)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    log_event(f"Admin: {current_user['email']} updated post {post_id}")
    return post

@app.post("/api/admin/blog/{post_id}/toggle")
def toggle_blog_post(post_id: str, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    post = _get_or_404(db, "blog_post", post_id, "Post not found")
    post = update_document(db, "blog_post", post_id, {"published": not post.get("published", False)})
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    post["message"] = "Post published" if post["published"] else "Post unpublished"
    log_event(f"Admin: post {post_id} {'published' if post['published'] else 'unpublished'}")
    return post

@app.delete("/api/admin/blog/{post_id}")
def delete_blog_post(post_id: str, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    if not delete_document(db, "blog_post", post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    log_event(f"Admin: {current_user['email']} deleted post {post_id}")
    return {"success": True}

# Images
@app.post("/api/admin/images", status_code=201)
def upload_image(file: UploadFile = File(...), upsert: bool = False, current_user: dict = Depends(require_admin), db=Depends(get_db)):
    filename = os.path.basename(file.filename or "")
    if not filename:
        raise HTTPException(status_code=400, detail="A file name is required")
    images = bucket(db, config.PRODUCT_IMAGES_BUCKET)
    try:
        stored = images.upload(filename, file.file.read(), content_type=file.content_type or "image/jpeg", upsert=upsert)
    except StorageError as e:
        raise HTTPException(status_code=409, detail=str(e))
    log_event(f"Admin: uploaded {filename} ({stored['size']} bytes)")
    return {**stored, "public_url": images.get_public_url(filename)}

@app.post("/api/admin/migrate-images")
def run_image_migration(current_user: dict = Depends(require_admin), db=Depends(get_db)):
    summary = migrate_images(db, config.ASSETS_DIR)
    return {"message": "Images migrated successfully!", **summary}

@app.get(PUBLIC_PREFIX + "/{bucket_name}/{path:path}")
def public_object(bucket_name: str, path: str, db=Depends(get_db)):
    obj = bucket(db, bucket_name).download(path)
    if not obj:
        raise HTTPException(status_code=404, detail="Object not found")
    return Response(content=obj["data"], media_type=obj.get("content_type") or "application/octet-stream")


# Health + test
@app.get("/")
def root():
    return {"message": f"{config.BRAND_NAME} storefront API running"}

@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database_url": "✅ Set" if config.DATABASE_URL else "❌ Not Set",
        "database_name": "✅ Set" if config.DATABASE_NAME else "❌ Not Set",
        "collections": []
    }
    try:
        if database.db is not None:
            collections = database.db.list_collection_names()
            response["collections"] = collections[:10]
    except PyMongoError as e:
        response["error"] = str(e)[:120]
    return response

SAMPLE_PRODUCTS = [
    {"name": "Crochet Sea Turtle", "description": "Hand-stitched amigurumi turtle in ocean blues", "price": 650, "stock_quantity": 12, "category": "Accessories", "sku": "YY-TURTLE-01", "image_url": "/src/assets/crochet-sea-turtle.jpg", "is_featured": True},
    {"name": "Crochet Tulip Bouquet", "description": "A bouquet that never wilts", "price": 1200, "stock_quantity": 8, "category": "Accessories", "sku": "YY-TULIP-01", "image_url": "/src/assets/crochet-tulip-bouquet.jpg", "is_featured": True},
    {"name": "Mushroom Sleeve Shrug", "description": "Cropped shrug with mushroom motif sleeves", "price": 1850, "stock_quantity": 4, "category": "Apparel", "sku": "YY-SHRUG-01", "image_url": "/src/assets/mushroom-sleeve-shrug.jpg", "is_featured": True},
    {"name": "Crochet Bucket Hat", "description": "Soft cotton bucket hat", "price": 899, "stock_quantity": 15, "category": "Apparel", "sku": "YY-HAT-01", "image_url": "/src/assets/crochet-bucket-hat.jpg", "is_featured": True},
    {"name": "Amigurumi Love Birds", "description": "A pair of cuddly love birds", "price": 750, "stock_quantity": 10, "category": "Accessories", "sku": "YY-BIRDS-01", "image_url": "/src/assets/amigurumi-love-birds.jpg"},
    {"name": "Amigurumi Lion", "description": "Lion plush with a fluffy mane", "price": 950, "stock_quantity": 6, "category": "Accessories", "sku": "YY-LION-01", "image_url": "/src/assets/amigurumi-lion.jpg"},
    {"name": "Spidey Keychain", "description": "Tiny crochet hero for your keys", "price": 250, "stock_quantity": 30, "category": "Accessories", "sku": "YY-KEY-01", "image_url": "/src/assets/spidey-keychain.jpg"},
    {"name": "Crochet Bookmark", "description": "Floral bookmark for readers", "price": 150, "stock_quantity": 40, "category": "Accessories", "sku": "YY-BOOK-01", "image_url": "/src/assets/crochet-bookmark.jpg"},
]

@app.get('/seed/init')
def seed(db=Depends(get_db)):
    ensure_indexes(db)
    admin_email = config.ADMIN_EMAIL.lower()
    if not db['user'].find_one({'email': admin_email}):
        user_id = create_document(db, 'user', User(email=admin_email, password_hash=hash_password(config.ADMIN_PASSWORD)))
        profile = Profile(email=admin_email, full_name='Admin', role='admin')
        db['profile'].insert_one({'_id': to_object_id(user_id), **profile.model_dump(), 'created_at': now(), 'updated_at': now()})
    created = 0
    for p in SAMPLE_PRODUCTS:
        if not db['product'].find_one({'sku': p['sku']}):
            create_document(db, 'product', Product(**p))
            created += 1
    log_event(f"Seed: {created} sample products created")
    return {'ok': True, 'products_created': created}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
