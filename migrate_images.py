"""
One-off maintenance: move bundled product images into object storage.

For every product whose image_url ends in a file that exists in the assets
directory, the file is uploaded to the product-images bucket and the
product's image_url is rewritten to the bucket's public URL. Products that
fail are logged and skipped; the rest of the run continues.

Usage:
    python migrate_images.py [--assets DIR]
"""
import argparse
import os
import sys
from typing import Dict

from pymongo.errors import PyMongoError

import config
import database
from database import get_documents, update_document
from logger import configure_logging, log_error, log_event, log_warning
from storage import StorageError, bucket

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
IMAGE_CONTENT_TYPE = "image/jpeg"


def bundled_images(assets_dir: str) -> Dict[str, str]:
    """Maps file name -> path for every image in the assets directory"""
    if not os.path.isdir(assets_dir):
        return {}
    return {
        name: os.path.join(assets_dir, name)
        for name in os.listdir(assets_dir)
        if name.lower().endswith(IMAGE_EXTENSIONS)
    }


def migrate_images(db, assets_dir: str = config.ASSETS_DIR) -> Dict[str, int]:
    images = bundled_images(assets_dir)
    target = bucket(db, config.PRODUCT_IMAGES_BUCKET)
    summary = {"migrated": 0, "skipped": 0, "failed": 0}

    products = get_documents(db, "product", projection={"name": 1, "image_url": 1})
    for product in products:
        image_url = product.get("image_url")
        if not image_url:
            summary["skipped"] += 1
            continue
        filename = image_url.rstrip("/").split("/")[-1]
        if filename not in images:
            summary["skipped"] += 1
            continue

        try:
            with open(images[filename], "rb") as f:
                target.upload(filename, f.read(), content_type=IMAGE_CONTENT_TYPE, upsert=True)
        except (OSError, StorageError, PyMongoError) as e:
            log_error(f"Error uploading {filename}", e)
            summary["failed"] += 1
            continue

        public_url = target.get_public_url(filename)
        try:
            update_document(db, "product", product["id"], {"image_url": public_url})
        except PyMongoError as e:
            log_error(f"Error updating product {product.get('name')}", e)
            summary["failed"] += 1
            continue
        summary["migrated"] += 1
        log_event(f"Migrated image for {product.get('name')}: {public_url}")

    log_event(f"Image migration finished: {summary}")
    return summary


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Upload bundled product images to storage")
    parser.add_argument("--assets", default=config.ASSETS_DIR, help="directory holding the bundled images")
    args = parser.parse_args(argv)

    configure_logging()
    if database.db is None:
        log_warning("DATABASE_URL / DATABASE_NAME are not set; nothing to migrate")
        return 1
    try:
        migrate_images(database.db, args.assets)
    except PyMongoError as e:
        log_error("Failed to migrate images", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
