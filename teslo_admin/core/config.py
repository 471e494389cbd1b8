import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the Teslo admin surface.
    Projects should provide database paths via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    SHOP_DB = os.getenv('SHOP_DB', os.path.join(DB_DIR, "shop.db"))
    LOGS_DB = os.getenv('LOGS_DB', os.path.join(DB_DIR, "logs.db"))

    # Table names
    PRODUCTS_TABLE = "products"
    ORDERS_TABLE = "orders"
    USERS_TABLE = "users"

    # Uploads land in <static_folder>/<UPLOAD_SUBFOLDER>
    UPLOAD_SUBFOLDER = os.getenv('UPLOAD_SUBFOLDER', 'products')
    MAX_UPLOAD_BYTES = int(os.getenv('MAX_UPLOAD_BYTES', str(5 * 1024 * 1024)))

    # Admin API used by the HTTP store/uploader adapters
    ADMIN_API_URL = os.getenv('ADMIN_API_URL', 'http://localhost:5000/api')
    ADMIN_API_TIMEOUT = float(os.getenv('ADMIN_API_TIMEOUT', '10'))

    # Origins allowed to read the listing APIs (comma separated)
    DASHBOARD_ORIGINS = [
        origin.strip()
        for origin in os.getenv('DASHBOARD_ORIGINS', 'http://localhost:3000').split(',')
        if origin.strip()
    ]

    BRAND_NAME = os.getenv('BRAND_NAME', 'Teslo Shop')


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val:
        return val
    return os.getenv(key, default)
