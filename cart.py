"""
Cart: one row per (user, product) in the "cart_item" collection.
"""
from typing import Any, Dict, List

from pymongo.errors import DuplicateKeyError

from database import get_document, now, serialize, to_object_id
from logger import log_event
from schemas import CartItem

PRODUCT_FIELDS = ("name", "price", "image_url", "sku", "stock_quantity")


class CartError(Exception):
    pass


class ProductNotFound(CartError):
    pass


class CartItemNotFound(CartError):
    pass


class OutOfStock(CartError):
    def __init__(self, product_name: str):
        super().__init__(f"Out of stock: {product_name}")
        self.product_name = product_name


def clamp_quantity(quantity: int, stock_quantity: int) -> int:
    """Keeps a quantity between 1 and the available stock"""
    return max(1, min(quantity, stock_quantity))


def load_cart(db, user_id: str) -> List[Dict[str, Any]]:
    """Cart rows of a user, each joined with its product"""
    rows = list(db["cart_item"].find({"user_id": user_id}).sort([("created_at", 1)]))
    product_ids = [oid for oid in (to_object_id(r["product_id"]) for r in rows) if oid is not None]
    products = {str(p["_id"]): p for p in db["product"].find({"_id": {"$in": product_ids}})}
    items = []
    for row in rows:
        prod = products.get(row["product_id"])
        items.append({
            "id": str(row["_id"]),
            "product_id": row["product_id"],
            "quantity": row["quantity"],
            "products": (
                {"id": row["product_id"], **{f: prod.get(f) for f in PRODUCT_FIELDS}}
                if prod else None
            ),
        })
    return items


def cart_total(items: List[Dict[str, Any]]) -> float:
    return sum((item["products"] or {}).get("price", 0) * item["quantity"] for item in items)


def cart_count(db, user_id: str) -> int:
    return sum(row["quantity"] for row in db["cart_item"].find({"user_id": user_id}, {"quantity": 1}))


def add_to_cart(db, user_id: str, product_id: str, quantity: int = 1) -> Dict[str, Any]:
    """Read-or-create the user's row for the product and add to its quantity"""
    product = get_document(db, "product", product_id)
    if not product:
        raise ProductNotFound(product_id)
    stock = product.get("stock_quantity", 0)
    if stock <= 0:
        raise OutOfStock(product["name"])
    quantity = clamp_quantity(quantity, stock)

    key = {"user_id": user_id, "product_id": product_id}
    existing = db["cart_item"].find_one(key)
    if existing is None:
        try:
            row = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
            db["cart_item"].insert_one({**row.model_dump(), "created_at": now(), "updated_at": now()})
            log_event(f"Cart: user {user_id} added {quantity} x {product['sku']}")
            return {"created": True, **serialize(db["cart_item"].find_one(key))}
        except DuplicateKeyError:
            # Another request created the row first
            pass
    db["cart_item"].update_one(key, {"$inc": {"quantity": quantity}, "$set": {"updated_at": now()}})
    log_event(f"Cart: user {user_id} added {quantity} more x {product['sku']}")
    return {"created": False, **serialize(db["cart_item"].find_one(key))}


def _owned_row(db, user_id: str, item_id: str) -> Dict[str, Any]:
    oid = to_object_id(item_id)
    row = db["cart_item"].find_one({"_id": oid, "user_id": user_id}) if oid is not None else None
    if row is None:
        raise CartItemNotFound(item_id)
    return row


def set_quantity(db, user_id: str, item_id: str, quantity: int) -> Dict[str, Any]:
    row = _owned_row(db, user_id, item_id)
    product = get_document(db, "product", row["product_id"])
    stock = product.get("stock_quantity", 0) if product else row["quantity"]
    quantity = clamp_quantity(quantity, stock)
    db["cart_item"].update_one({"_id": row["_id"]}, {"$set": {"quantity": quantity, "updated_at": now()}})
    return serialize(db["cart_item"].find_one({"_id": row["_id"]}))


def remove_item(db, user_id: str, item_id: str) -> None:
    row = _owned_row(db, user_id, item_id)
    db["cart_item"].delete_one({"_id": row["_id"]})


def clear_cart(db, user_id: str) -> int:
    return db["cart_item"].delete_many({"user_id": user_id}).deleted_count
