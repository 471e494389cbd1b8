"""
Products Admin Routes
=====================

Listing and edit pages, plus the JSON API the edit page submits to.
"""

import logging

from flask import render_template, request, redirect, url_for, jsonify
from . import products_admin_bp, products_api_bp
from .controller import ProductFormController
from .draft import VALID_AUDIENCES, VALID_CATEGORIES, VALID_SIZES, MIN_IMAGES
from .exceptions import ConflictError, NotFoundError, UploadError, ValidationError
from .models import ProductStore, summarize
from .uploads import LocalAssetUploader
from ...core import LoggingService

logger = logging.getLogger(__name__)


def _error_response(error, status):
    body = {'success': False, 'error': str(error)}
    if isinstance(error, ValidationError):
        body['errors'] = error.errors
    return jsonify(body), status


# ===== Admin Pages =====

@products_admin_bp.route('/')
def products_list():
    """Product listing page"""
    products = ProductStore().get_all()
    rows = [summarize(p) for p in products]
    return render_template(
        'products/products_list.html',
        title=f"Products ({len(rows)})",
        rows=rows
    )


@products_admin_bp.route('/<slug>')
def product_edit(slug):
    """Product edit page; 'new' opens a blank product"""
    try:
        controller = ProductFormController.for_slug(ProductStore(), LocalAssetUploader(), slug)
    except NotFoundError:
        return redirect(url_for('products_admin.products_list'))

    draft = controller.draft
    return render_template(
        'products/product_edit.html',
        draft=draft,
        subtitle=f"Editing: {draft.title}" if draft.title else "New product",
        categories=VALID_CATEGORIES,
        audiences=VALID_AUDIENCES,
        sizes=VALID_SIZES,
        min_images=MIN_IMAGES
    )


# ===== JSON API =====

@products_api_bp.route('/products', methods=['GET'])
def api_products():
    """All products, newest first"""
    try:
        products = ProductStore().get_all()
        return jsonify({'success': True, 'products': [summarize(p) for p in products]})
    except Exception as e:
        LoggingService.log_error_with_traceback('products', e)
        return _error_response(e, 500)


@products_api_bp.route('/products/<slug>', methods=['GET'])
def api_product(slug):
    """Single product by slug"""
    try:
        product = ProductStore().get_by_slug(slug)
    except Exception as e:
        LoggingService.log_error_with_traceback('products', e, {'slug': slug})
        return _error_response(e, 500)

    if not product:
        return _error_response(NotFoundError('Product not found'), 404)
    return jsonify({'success': True, 'product': product})


@products_api_bp.route('/products', methods=['POST'])
def api_create_product():
    """Create a product from a JSON body"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error_response(ValidationError('A JSON object is required'), 400)

    try:
        product = ProductStore().create(data)
    except ValidationError as e:
        return _error_response(e, 400)
    except ConflictError as e:
        return _error_response(e, 409)
    except Exception as e:
        LoggingService.log_error_with_traceback('products', e, {'slug': data.get('slug')})
        return _error_response(e, 500)

    LoggingService.info('products', f"Product created: {product['slug']}", {'id': product['id']})
    return jsonify({'success': True, 'product': product}), 201


@products_api_bp.route('/products', methods=['PUT'])
def api_update_product():
    """Update a product; the JSON body carries its id"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error_response(ValidationError('A JSON object is required'), 400)

    product_id = data.get('id')
    if not product_id:
        return _error_response(ValidationError({'id': 'Product id required'}), 400)

    try:
        product = ProductStore().update(product_id, data)
    except ValidationError as e:
        return _error_response(e, 400)
    except NotFoundError as e:
        return _error_response(e, 404)
    except ConflictError as e:
        return _error_response(e, 409)
    except Exception as e:
        LoggingService.log_error_with_traceback('products', e, {'id': product_id})
        return _error_response(e, 500)

    LoggingService.info('products', f"Product updated: {product['slug']}", {'id': product_id})
    return jsonify({'success': True, 'product': product})


@products_api_bp.route('/upload', methods=['POST'])
def api_upload():
    """Store one product image (multipart field 'img')"""
    if 'img' not in request.files:
        return jsonify({'success': False, 'error': 'No image file provided'}), 400

    file = request.files['img']
    try:
        reference = LocalAssetUploader().upload(file)
    except UploadError as e:
        logger.warning(f"Rejected upload {file.filename}: {e}")
        return _error_response(e, 400)
    except Exception as e:
        LoggingService.log_error_with_traceback('uploads', e, {'filename': file.filename})
        return jsonify({'success': False, 'error': 'Failed to upload image'}), 500

    return jsonify({'success': True, 'message': reference})
