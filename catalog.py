"""
Catalog browsing over a fetched product snapshot.

The shop view loads every in-stock product once and narrows it down in
memory, so filtering and sorting here never touch the backend.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import config

PRICE_RANGES = ("all", "under500", "500-1000", "over1000")
SORT_OPTIONS = ("popularity", "price-low", "price-high", "newest")


def matches_query(product: Dict[str, Any], q: str) -> bool:
    needle = q.lower()
    return needle in (product.get("name") or "").lower() or needle in (product.get("sku") or "").lower()


def in_price_range(price: float, price_range: str) -> bool:
    if price_range == "under500":
        return price < 500
    if price_range == "500-1000":
        return 500 <= price <= 1000
    if price_range == "over1000":
        return price > 1000
    return True


def sort_products(products: List[Dict[str, Any]], sort: str) -> List[Dict[str, Any]]:
    if sort == "price-low":
        return sorted(products, key=lambda p: p.get("price", 0))
    if sort == "price-high":
        return sorted(products, key=lambda p: p.get("price", 0), reverse=True)
    if sort == "newest":
        return sorted(products, key=lambda p: p.get("created_at") or datetime.min, reverse=True)
    # popularity
    return sorted(products, key=lambda p: p.get("sold_count", 0), reverse=True)


def with_badges(product: Dict[str, Any]) -> Dict[str, Any]:
    return {**product, "bestseller": product.get("sold_count", 0) > config.BESTSELLER_THRESHOLD}


def browse(
    products: Iterable[Dict[str, Any]],
    q: Optional[str] = None,
    category: Optional[str] = None,
    price: str = "all",
    sort: str = "popularity",
) -> List[Dict[str, Any]]:
    """Applies search, category, price range and sort to a product snapshot"""
    result = list(products)
    if q:
        result = [p for p in result if matches_query(p, q)]
    if category and category != "all":
        result = [p for p in result if p.get("category") == category]
    if price and price != "all":
        result = [p for p in result if in_price_range(p.get("price", 0), price)]
    return [with_badges(p) for p in sort_products(result, sort)]


def categories(products: Iterable[Dict[str, Any]]) -> List[str]:
    return sorted({p["category"] for p in products if p.get("category")})


def average_rating(reviews: List[Dict[str, Any]]) -> float:
    if not reviews:
        return 0
    return sum(r["rating"] for r in reviews) / len(reviews)
