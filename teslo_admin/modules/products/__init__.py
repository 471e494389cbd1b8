"""
Products Admin Module
=====================

Admin interface for product management.

Provides:
- Product listing page
- Product edit page (``/admin/products/new`` for a blank product)
- JSON API for listing, creating and updating products
- Product image uploads
- ProductFormController, the editable form state behind the edit page
"""

from flask import Blueprint

# Server-rendered admin pages
products_admin_bp = Blueprint(
    'products_admin',
    __name__,
    url_prefix='/admin/products',
    template_folder='templates'
)

# JSON API used by the edit page and the HTTP adapters
products_api_bp = Blueprint(
    'products_api',
    __name__,
    url_prefix='/api/admin'
)

from . import routes
from .controller import ProductFormController, UploadOutcome
from .models import ProductStore
from .uploads import LocalAssetUploader
from .client import ApiAssetUploader, ApiProductStore

__all__ = [
    'products_admin_bp',
    'products_api_bp',
    'ProductFormController',
    'UploadOutcome',
    'ProductStore',
    'LocalAssetUploader',
    'ApiProductStore',
    'ApiAssetUploader',
]
