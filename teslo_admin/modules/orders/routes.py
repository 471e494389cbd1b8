"""
Orders Admin Routes
===================

Order listing consumed by the read-only admin dashboard.
"""

from flask import request, jsonify
from flask_cors import cross_origin
from . import orders_api_bp
from .models import OrderStore
from ...core import Config, LoggingService

# Origins for the dashboard that reads this endpoint
ALLOWED_ORIGINS = Config.DASHBOARD_ORIGINS


@orders_api_bp.route('', methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@cross_origin(origins=ALLOWED_ORIGINS, supports_credentials=False)
def api_orders():
    """All orders sorted by creation time, newest first"""
    if request.method != 'GET':
        return jsonify({'message': 'Bad request'}), 400

    try:
        orders = OrderStore().get_all()
    except Exception as e:
        LoggingService.log_error_with_traceback('orders', e)
        return jsonify({'message': 'Could not load orders'}), 500

    return jsonify(orders), 200
