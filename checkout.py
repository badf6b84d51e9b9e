"""
Checkout

The wizard walks through four steps: shipping details, order review,
payment method and confirmation. Only the last transition touches the
backend, through place_order().

place_order() issues its writes one after another (order, order items,
stock updates, cart clear). The backend gives no multi-document
transaction, so a failure while writing items or adjusting stock is undone
by compensating writes before the error is raised: stock is restored and
the order with its items is removed. Stock is only decremented with a
conditional update, so it never drops below zero.

An Idempotency-Key is claimed (unique per user) before the cart is read.
A second request with the same key gets the stored response once the first
one completed, and a conflict while it is still running. A failed placement
releases the key so the client can retry.
"""
import hashlib
import json
import time
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

import config
from cart import OutOfStock, clear_cart, cart_total, load_cart
from database import create_document, now, serialize, to_object_id
from logger import log_error, log_event
from schemas import Order, OrderItem

STEP_SHIPPING = 1
STEP_REVIEW = 2
STEP_PAYMENT = 3
STEP_CONFIRMATION = 4
STEP_NAMES = {
    STEP_SHIPPING: "Shipping",
    STEP_REVIEW: "Review",
    STEP_PAYMENT: "Payment",
    STEP_CONFIRMATION: "Confirmation",
}

REQUIRED_SHIPPING_FIELDS = ("name", "phone", "address_line_1", "city", "state", "zip_code")

KEY_IN_PROGRESS = "in_progress"
KEY_COMPLETED = "completed"


class CheckoutError(Exception):
    pass


class EmptyCart(CheckoutError):
    pass


class IdempotencyConflict(CheckoutError):
    pass


class OrderFailed(CheckoutError):
    pass


def shipping_from_profile(profile: Optional[Dict[str, Any]]) -> Dict[str, str]:
    profile = profile or {}
    return {
        "name": profile.get("full_name") or "",
        "phone": profile.get("phone") or "",
        "address_line_1": profile.get("address_line_1") or "",
        "address_line_2": profile.get("address_line_2") or "",
        "city": profile.get("city") or "",
        "state": profile.get("state") or "",
        "zip_code": profile.get("zip_code") or "",
    }


def missing_shipping_fields(shipping: Dict[str, Any]) -> List[str]:
    return [f for f in REQUIRED_SHIPPING_FIELDS if not (shipping.get(f) or "").strip()]


def next_step(step: int, shipping: Optional[Dict[str, Any]] = None) -> int:
    """Advances the wizard; leaving the shipping step needs complete details"""
    if step == STEP_SHIPPING and missing_shipping_fields(shipping or {}):
        return STEP_SHIPPING
    # Payment -> confirmation only happens by placing the order
    return step + 1 if step < STEP_PAYMENT else step


def format_shipping_address(shipping: Dict[str, Any]) -> str:
    line2 = shipping.get("address_line_2")
    return (
        f"{shipping['address_line_1']}, "
        f"{line2 + ', ' if line2 else ''}"
        f"{shipping['city']}, {shipping['state']} - {shipping['zip_code']}"
    )


def generate_order_number() -> str:
    return f"ORD-{int(time.time() * 1000)}"


def summarize(items: List[Dict[str, Any]]) -> Dict[str, float]:
    subtotal = cart_total(items)
    return {"subtotal": subtotal, "shipping_fee": config.SHIPPING_FEE, "total": subtotal + config.SHIPPING_FEE}


def request_hash(shipping: Dict[str, Any], payment_method: str) -> str:
    body = {"shipping": shipping, "payment_method": payment_method}
    return hashlib.sha256(json.dumps(body, sort_keys=True, default=str).encode()).hexdigest()


def _compensate(db, order_id: str, decremented: List[Dict[str, Any]]) -> None:
    for item in decremented:
        try:
            db["product"].update_one(
                {"_id": to_object_id(item["product_id"])},
                {"$inc": {"stock_quantity": item["quantity"], "sold_count": -item["quantity"]}},
            )
        except PyMongoError as e:
            log_error(f"Checkout: could not restore stock for product {item['product_id']}", e)
    try:
        db["order_item"].delete_many({"order_id": order_id})
        db["order"].delete_one({"_id": to_object_id(order_id)})
    except PyMongoError as e:
        log_error(f"Checkout: could not remove order {order_id}", e)


def _check_stock(items: List[Dict[str, Any]]) -> None:
    for item in items:
        product = item["products"]
        if product is None:
            raise OutOfStock(item["product_id"])
        if item["quantity"] > (product.get("stock_quantity") or 0):
            raise OutOfStock(product["name"])


def _claim_key(db, user_id: str, key: str, body_hash: str) -> Optional[Dict[str, Any]]:
    """
    Reserves the key before anything is written. Returns the stored response
    when an earlier request with the same key already completed.
    """
    try:
        db["idempotency_key"].insert_one({
            "user_id": user_id,
            "key": key,
            "request_hash": body_hash,
            "status": KEY_IN_PROGRESS,
            "response": None,
            "created_at": now(),
        })
        return None
    except DuplicateKeyError:
        rec = db["idempotency_key"].find_one({"user_id": user_id, "key": key})
    if rec is not None and rec["request_hash"] != body_hash:
        raise IdempotencyConflict("Idempotency key reused with a different request")
    if rec is None or rec["status"] != KEY_COMPLETED:
        raise IdempotencyConflict("An order with this idempotency key is still being processed")
    return {**rec["response"], "replayed": True}


def _release_key(db, user_id: str, key: str) -> None:
    try:
        db["idempotency_key"].delete_one({"user_id": user_id, "key": key, "status": KEY_IN_PROGRESS})
    except PyMongoError as e:
        log_error(f"Checkout: could not release idempotency key {key}", e)


def _complete_key(db, user_id: str, key: str, result: Dict[str, Any]) -> None:
    try:
        db["idempotency_key"].update_one(
            {"user_id": user_id, "key": key},
            {"$set": {"status": KEY_COMPLETED, "response": result, "completed_at": now()}},
        )
    except PyMongoError as e:
        log_error(f"Checkout: order placed but idempotency key {key} was not completed", e)


def place_order(
    db,
    user_id: str,
    shipping: Dict[str, Any],
    payment_method: str = "card",
    idempotency_key: Optional[str] = None,
) -> Dict[str, Any]:
    """Turns the user's cart into an order and returns the confirmation payload"""
    if not idempotency_key:
        return _place_order(db, user_id, shipping, payment_method)

    replay = _claim_key(db, user_id, idempotency_key, request_hash(shipping, payment_method))
    if replay is not None:
        log_event(f"Checkout: replayed order for key {idempotency_key}")
        return replay
    try:
        result = _place_order(db, user_id, shipping, payment_method)
    except Exception:
        _release_key(db, user_id, idempotency_key)
        raise
    _complete_key(db, user_id, idempotency_key, result)
    return result


def _place_order(db, user_id: str, shipping: Dict[str, Any], payment_method: str) -> Dict[str, Any]:
    items = load_cart(db, user_id)
    if not items:
        raise EmptyCart("Your cart is empty")
    _check_stock(items)
    totals = summarize(items)

    order = Order(
        user_id=user_id,
        order_number=generate_order_number(),
        total_amount=totals["total"],
        status="pending",
        shipping_name=shipping["name"],
        shipping_phone=shipping["phone"],
        shipping_address=format_shipping_address(shipping),
        payment_method=payment_method,
    )
    try:
        order_id = create_document(db, "order", order)
    except PyMongoError as e:
        log_error("Checkout: failed to create order", e)
        raise OrderFailed("Failed to create order") from e

    snapshots = [
        OrderItem(
            order_id=order_id,
            product_id=item["product_id"],
            product_name=item["products"]["name"],
            product_sku=item["products"]["sku"],
            quantity=item["quantity"],
            price=item["products"]["price"],
        ).model_dump()
        for item in items
    ]
    decremented: List[Dict[str, Any]] = []
    try:
        db["order_item"].insert_many([{**s, "created_at": now()} for s in snapshots])
        for item in items:
            res = db["product"].update_one(
                {"_id": to_object_id(item["product_id"]), "stock_quantity": {"$gte": item["quantity"]}},
                {"$inc": {"stock_quantity": -item["quantity"], "sold_count": item["quantity"]},
                 "$set": {"updated_at": now()}},
            )
            if res.modified_count == 0:
                raise OutOfStock(item["products"]["name"])
            decremented.append(item)
    except OutOfStock:
        log_event(f"Checkout: stock changed while placing order {order.order_number}, rolling back")
        _compensate(db, order_id, decremented)
        raise
    except PyMongoError as e:
        log_error(f"Checkout: failed while placing order {order.order_number}, rolling back", e)
        _compensate(db, order_id, decremented)
        raise OrderFailed("Failed to save order items") from e

    cart_cleared = True
    try:
        clear_cart(db, user_id)
    except PyMongoError as e:
        cart_cleared = False
        log_error(f"Checkout: order {order.order_number} placed but cart was not cleared", e)

    saved = serialize(db["order"].find_one({"_id": to_object_id(order_id)}))
    log_event(f"Checkout: order {order.order_number} placed by {user_id} ({len(items)} lines, total {totals['total']})")
    return {
        "step": STEP_CONFIRMATION,
        "order": saved,
        "items": snapshots,
        "cart_cleared": cart_cleared,
        "replayed": False,
    }
