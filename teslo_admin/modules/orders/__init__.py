"""
Orders Admin Module
===================

Read-only order listing for the admin dashboard.

Provides:
- ``GET /api/admin/orders``: every order, newest first, with its user
"""

from flask import Blueprint

orders_api_bp = Blueprint(
    'orders_api',
    __name__,
    url_prefix='/api/admin/orders'
)

from . import routes
from .models import OrderStore

__all__ = ['orders_api_bp', 'OrderStore']
