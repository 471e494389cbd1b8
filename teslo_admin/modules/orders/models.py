"""
Orders Models
=============

Order rows in SHOP_DB, listed with their user populated.
"""

import json
import logging
from datetime import datetime

from ...core import Config, Database

logger = logging.getLogger(__name__)


def _now():
    return datetime.now().isoformat(sep=' ', timespec='microseconds')


def _loads(value, default):
    try:
        return json.loads(value) if value else default
    except (json.JSONDecodeError, TypeError):
        return default


class OrderStore:

    table = Config.ORDERS_TABLE
    users_table = Config.USERS_TABLE

    def __init__(self, db_path=None):
        self._db_path = db_path

    @property
    def db_path(self):
        return self._db_path or Database.shop_db_path()

    def get_all(self):
        """All orders, newest first, each with ``user`` as {id, name, email} or None"""
        with Database.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(f'''
                SELECT o.*, u.name AS user_name, u.email AS user_email
                FROM {self.table} o
                LEFT JOIN {self.users_table} u ON u.id = o.user_id
                ORDER BY o.created_at DESC, o.id DESC
            ''')
            rows = cursor.fetchall()

        orders = []
        for row in rows:
            order = dict(row)
            user_name = order.pop('user_name')
            user_email = order.pop('user_email')
            user_id = order.pop('user_id')
            order['user'] = {
                'id': user_id,
                'name': user_name,
                'email': user_email
            } if user_name is not None else None
            order['order_items'] = _loads(order.get('order_items'), [])
            order['shipping_address'] = _loads(order.get('shipping_address'), None)
            order['is_paid'] = bool(order.get('is_paid'))
            orders.append(order)
        return orders

    def create(self, user_id, order_items, total, subtotal=None, tax=0,
               shipping_address=None, is_paid=False, transaction_id=None):
        """Insert an order and return its id"""
        number_of_items = sum(int(item.get('quantity', 1)) for item in order_items)
        now = _now()
        with Database.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(f'''
                INSERT INTO {self.table}
                (user_id, order_items, shipping_address, number_of_items, subtotal, tax, total,
                 is_paid, paid_at, transaction_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                user_id,
                json.dumps(order_items),
                json.dumps(shipping_address) if shipping_address else None,
                number_of_items,
                subtotal if subtotal is not None else total - tax,
                tax,
                total,
                1 if is_paid else 0,
                now if is_paid else None,
                transaction_id,
                now,
                now
            ))
            conn.commit()
            order_id = cursor.lastrowid

        logger.info(f"Created order {order_id} for user {user_id}")
        return order_id

    def create_user(self, name, email, role='client'):
        """Insert a user row and return its id"""
        with Database.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f'INSERT INTO {self.users_table} (name, email, role) VALUES (?, ?, ?)',
                (name, email.lower().strip(), role)
            )
            conn.commit()
            return cursor.lastrowid
