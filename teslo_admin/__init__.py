"""
Teslo Admin - A Flask Shop Admin
================================

Admin surface for a clothing shop:
- Product listing and product edit pages
- Product JSON API and image uploads
- Order listing API for the dashboard

Usage:
    from flask import Flask
    from teslo_admin import TesloAdmin

    app = Flask(__name__)
    TesloAdmin(app)

Or register blueprints yourself:
    from teslo_admin.modules.products import products_admin_bp, products_api_bp
    app.register_blueprint(products_admin_bp)
"""

import logging
import os

from .core import Config, Database

__version__ = '0.1.0'

logger = logging.getLogger(__name__)

# Config keys seeded into app.config when the host app hasn't set them
DEFAULT_CONFIG_KEYS = (
    'DB_DIR',
    'SHOP_DB',
    'LOGS_DB',
    'UPLOAD_SUBFOLDER',
    'MAX_UPLOAD_BYTES',
    'ADMIN_API_URL',
    'ADMIN_API_TIMEOUT',
    'DASHBOARD_ORIGINS',
)

DEFAULT_FEATURES = {
    'products': True,
    'orders': True,
}


class TesloAdmin:
    """Flask extension that wires the admin modules into an app"""

    def __init__(self, app=None, config=None):
        self._config = config or {}
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._apply_defaults(app)
        self._setup_database_dir(app)

        with app.app_context():
            Database.init_shop_db()

        self._register_modules(app)
        self._setup_context_processor(app)

        app.extensions['teslo_admin'] = self
        logger.info("Teslo admin initialised with modules: %s", ', '.join(self._registered))

    def _apply_defaults(self, app):
        for key in DEFAULT_CONFIG_KEYS:
            if not app.config.get(key):
                app.config[key] = getattr(Config, key)

        # Databases follow a DB_DIR set by the host app
        db_dir = app.config['DB_DIR']
        if db_dir != Config.DB_DIR:
            for key, filename in (('SHOP_DB', 'shop.db'), ('LOGS_DB', 'logs.db')):
                if app.config[key] == getattr(Config, key):
                    app.config[key] = os.path.join(db_dir, filename)

    def _setup_database_dir(self, app):
        os.makedirs(app.config['DB_DIR'], exist_ok=True)

    def _features(self):
        features = dict(DEFAULT_FEATURES)
        features.update(self._config.get('features', {}))
        return features

    def _register_modules(self, app):
        features = self._features()

        if features.get('products'):
            from .modules.products import products_admin_bp, products_api_bp
            app.register_blueprint(products_admin_bp)
            app.register_blueprint(products_api_bp)
            self._registered.append('products')

        if features.get('orders'):
            from .modules.orders import orders_api_bp
            app.register_blueprint(orders_api_bp)
            self._registered.append('orders')

    def _setup_context_processor(self, app):
        brand_name = self._config.get('brand_name') or app.config.get('BRAND_NAME') or Config.BRAND_NAME

        @app.context_processor
        def inject_teslo_admin():
            return {
                'teslo_admin_config': self._config,
                'brand_name': brand_name,
            }

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['TesloAdmin', 'Config', 'Database']
