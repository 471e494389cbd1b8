import os
import sqlite3
from .config import Config, get_config_value


class Database:

    @staticmethod
    def connect(path):
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def shop_db_path():
        """Resolve the shop database path (app config > Config > env)"""
        return get_config_value('SHOP_DB', Config.SHOP_DB)

    @staticmethod
    def init_shop_db(db_path=None):
        """
        Create the products, orders and users tables if they don't exist.
        Safe to call repeatedly.
        """
        db_path = db_path or Database.shop_db_path()
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {Config.PRODUCTS_TABLE} (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    slug TEXT UNIQUE NOT NULL,
                    description TEXT NOT NULL,
                    in_stock INTEGER NOT NULL DEFAULT 0,
                    price REAL NOT NULL DEFAULT 0,
                    category TEXT NOT NULL,
                    audience TEXT NOT NULL,
                    sizes TEXT NOT NULL DEFAULT '[]',
                    tags TEXT NOT NULL DEFAULT '[]',
                    images TEXT NOT NULL DEFAULT '[]',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {Config.USERS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT UNIQUE NOT NULL,
                    role TEXT NOT NULL DEFAULT 'client',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS {Config.ORDERS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER,
                    order_items TEXT NOT NULL DEFAULT '[]',
                    shipping_address TEXT,
                    number_of_items INTEGER NOT NULL DEFAULT 0,
                    subtotal REAL NOT NULL DEFAULT 0,
                    tax REAL NOT NULL DEFAULT 0,
                    total REAL NOT NULL DEFAULT 0,
                    is_paid BOOLEAN DEFAULT 0,
                    paid_at TIMESTAMP,
                    transaction_id TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (user_id) REFERENCES {Config.USERS_TABLE}(id)
                )
            """)

            cursor.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_products_created
                ON {Config.PRODUCTS_TABLE}(created_at DESC)
            """)
            cursor.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_orders_created
                ON {Config.ORDERS_TABLE}(created_at DESC)
            """)

            conn.commit()

        return db_path
