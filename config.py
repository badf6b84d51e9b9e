"""
Settings for the storefront.

Values come from the environment (or a local .env file). Business constants
that the views rely on are kept here so the API and the maintenance scripts
agree on them.
"""
import os

from dotenv import load_dotenv

load_dotenv()

BRAND_NAME = "Yarn_yantra"

# Backend
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "devsecret")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@yarnyantra.in")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "Admin@123")

# HTTP
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR")

# Contact
WHATSAPP_NUMBER = os.getenv("WHATSAPP_NUMBER", "1234567890")
WHATSAPP_URL = f"https://wa.me/{WHATSAPP_NUMBER}"

# Image migration
ASSETS_DIR = os.getenv("ASSETS_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets"))
PRODUCT_IMAGES_BUCKET = "product-images"

# Store rules
SHIPPING_FEE = 50
LOW_STOCK_THRESHOLD = 5
BESTSELLER_THRESHOLD = 10
FEATURED_LIMIT = 4
TOP_PRODUCTS_LIMIT = 5
RECENT_ORDERS_LIMIT = 5
