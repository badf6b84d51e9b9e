"""
Admin dashboard queries.

Each panel is an independent read; the dashboard fires them together and
waits for all of them.
"""
import asyncio
from typing import Any, Dict, List

from starlette.concurrency import run_in_threadpool

import config
from database import count_documents, get_documents, start_of_today


def all_products(db) -> List[Dict[str, Any]]:
    return get_documents(db, "product", sort=[("created_at", -1)])


def stock_label(product: Dict[str, Any]) -> str:
    return "Sold Out" if product.get("stock_quantity", 0) == 0 else "Low Stock"


def low_stock(db) -> List[Dict[str, Any]]:
    products = get_documents(
        db, "product",
        {"stock_quantity": {"$lte": config.LOW_STOCK_THRESHOLD}},
        sort=[("stock_quantity", 1)],
    )
    return [{**p, "stock_label": stock_label(p)} for p in products]


def top_products(db) -> List[Dict[str, Any]]:
    return get_documents(db, "product", sort=[("sold_count", -1)], limit=config.TOP_PRODUCTS_LIMIT)


def pending_count(db) -> int:
    return count_documents(db, "order", {"status": "pending"})


def shipped_today_count(db) -> int:
    return count_documents(db, "order", {"status": "shipped", "updated_at": {"$gte": start_of_today()}})


async def order_metrics(db) -> Dict[str, int]:
    pending, shipped = await asyncio.gather(
        run_in_threadpool(pending_count, db),
        run_in_threadpool(shipped_today_count, db),
    )
    return {"total_pending": pending, "shipped_today": shipped}


async def load_dashboard(db) -> Dict[str, Any]:
    products, low, top, metrics = await asyncio.gather(
        run_in_threadpool(all_products, db),
        run_in_threadpool(low_stock, db),
        run_in_threadpool(top_products, db),
        order_metrics(db),
    )
    return {"products": products, "low_stock": low, "top_products": top, "metrics": metrics}
