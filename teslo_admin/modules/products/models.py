"""
Products Models
===============

SQLite-backed record store for products.
Products live in SHOP_DB alongside orders and users.
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime

from ...core import Config, Database, db_log
from .draft import clean_payload
from .exceptions import ConflictError, NotFoundError, StoreError

logger = logging.getLogger(__name__)

JSON_COLUMNS = ('sizes', 'tags', 'images')


def _now():
    return datetime.now().isoformat(sep=' ', timespec='microseconds')


def _row_to_dict(row):
    """Convert a sqlite3.Row to a dict with parsed JSON list columns"""
    d = dict(row)
    for column in JSON_COLUMNS:
        try:
            d[column] = json.loads(d.get(column) or '[]')
        except (json.JSONDecodeError, TypeError):
            d[column] = []
    return d


def summarize(product):
    """Row shape used by the admin listing page"""
    images = product.get('images') or []
    return {
        'id': product['id'],
        'img': images[0] if images else None,
        'title': product['title'],
        'audience': product['audience'],
        'category': product['category'],
        'in_stock': product['in_stock'],
        'price': product['price'],
        'sizes': ', '.join(product.get('sizes') or []),
        'slug': product['slug'],
    }


class ProductStore:
    """Fetch-by-slug, fetch-all, create and update over the products table"""

    table = Config.PRODUCTS_TABLE

    def __init__(self, db_path=None):
        self._db_path = db_path

    @property
    def db_path(self):
        return self._db_path or Database.shop_db_path()

    def get_by_slug(self, slug):
        """Get a single product by slug, or None"""
        try:
            with Database.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f'SELECT * FROM {self.table} WHERE slug = ?', (slug,))
                row = cursor.fetchone()
                return _row_to_dict(row) if row else None
        except sqlite3.Error as e:
            logger.error(f"Error getting product {slug}: {e}")
            raise StoreError(f"Could not load product '{slug}'") from e

    def get_by_id(self, product_id):
        """Get a single product by id, or None"""
        try:
            with Database.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f'SELECT * FROM {self.table} WHERE id = ?', (product_id,))
                row = cursor.fetchone()
                return _row_to_dict(row) if row else None
        except sqlite3.Error as e:
            logger.error(f"Error getting product {product_id}: {e}")
            raise StoreError(f"Could not load product {product_id}") from e

    def get_all(self):
        """Get all products ordered by most recent first"""
        try:
            with Database.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f'SELECT * FROM {self.table} ORDER BY created_at DESC, rowid DESC')
                return [_row_to_dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            logger.error(f"Error getting all products: {e}")
            raise StoreError("Could not load products") from e

    def _slug_owner(self, cursor, slug):
        cursor.execute(f'SELECT id FROM {self.table} WHERE slug = ?', (slug,))
        row = cursor.fetchone()
        return row['id'] if row else None

    def create(self, payload):
        """Validate and insert a new product. Returns the stored product."""
        data = clean_payload(payload)
        product_id = uuid.uuid4().hex
        now = _now()

        try:
            with Database.connect(self.db_path) as conn:
                cursor = conn.cursor()
                if self._slug_owner(cursor, data['slug']):
                    raise ConflictError(f"Slug '{data['slug']}' is already in use")

                cursor.execute(f'''
                    INSERT INTO {self.table}
                    (id, title, slug, description, in_stock, price, category, audience,
                     sizes, tags, images, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ''', (
                    product_id,
                    data['title'],
                    data['slug'],
                    data['description'],
                    data['in_stock'],
                    data['price'],
                    data['category'],
                    data['audience'],
                    json.dumps(data['sizes']),
                    json.dumps(data['tags']),
                    json.dumps(data['images']),
                    now,
                    now,
                ))
                conn.commit()
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Slug '{data['slug']}' is already in use") from e
        except sqlite3.Error as e:
            logger.error(f"Error creating product: {e}")
            db_log('error', 'products', 'Error creating product', {'error': str(e), 'slug': data['slug']})
            raise StoreError("Could not create product") from e

        logger.info(f"Created product {product_id}: {data['slug']}")
        return self.get_by_id(product_id)

    def update(self, product_id, payload):
        """Validate and overwrite an existing product. Returns the stored product."""
        data = clean_payload(payload)

        try:
            with Database.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f'SELECT id FROM {self.table} WHERE id = ?', (product_id,))
                if not cursor.fetchone():
                    raise NotFoundError(f"No product with id '{product_id}'")

                owner = self._slug_owner(cursor, data['slug'])
                if owner and owner != product_id:
                    raise ConflictError(f"Slug '{data['slug']}' is already in use")

                cursor.execute(f'''
                    UPDATE {self.table}
                    SET title = ?, slug = ?, description = ?, in_stock = ?, price = ?,
                        category = ?, audience = ?, sizes = ?, tags = ?, images = ?,
                        updated_at = ?
                    WHERE id = ?
                ''', (
                    data['title'],
                    data['slug'],
                    data['description'],
                    data['in_stock'],
                    data['price'],
                    data['category'],
                    data['audience'],
                    json.dumps(data['sizes']),
                    json.dumps(data['tags']),
                    json.dumps(data['images']),
                    _now(),
                    product_id,
                ))
                conn.commit()
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Slug '{data['slug']}' is already in use") from e
        except sqlite3.Error as e:
            logger.error(f"Error updating product {product_id}: {e}")
            db_log('error', 'products', f'Error updating product {product_id}', {'error': str(e)})
            raise StoreError(f"Could not update product {product_id}") from e

        logger.info(f"Updated product {product_id}: {data['slug']}")
        return self.get_by_id(product_id)
