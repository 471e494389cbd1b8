"""
Shared fixtures for the Teslo admin test suite.

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import io
import os
import shutil
import tempfile

import pytest
from flask import Flask

from teslo_admin import TesloAdmin
from teslo_admin.modules.products.exceptions import UploadError


def make_app(db_dir, static_dir=None, features=None):
    app = Flask(__name__, static_folder=static_dir or os.path.join(db_dir, "static"))
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = db_dir
    app.config["SHOP_DB"] = os.path.join(db_dir, "shop.db")
    app.config["LOGS_DB"] = os.path.join(db_dir, "logs.db")
    app.config["MAX_UPLOAD_BYTES"] = 1024
    TesloAdmin(app, {'features': features} if features else None)
    return app


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="teslo-admin-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir):
    """Fully initialised Flask app with all admin modules registered."""
    return make_app(tmp_db_dir)


@pytest.fixture
def client(app):
    return app.test_client()


def product_payload(**overrides):
    """A payload that passes every validation rule."""
    payload = {
        'title': "Men's Chill Crew Neck Sweatshirt",
        'slug': 'mens-chill-crew-neck-sweatshirt',
        'description': 'Introducing the Tesla Chill Collection.',
        'in_stock': 7,
        'price': 75,
        'category': 'shirts',
        'audience': 'men',
        'sizes': ['XS', 'S', 'M'],
        'tags': ['sweatshirt'],
        'images': ['1740176-00-A_0_2000.jpg', '1740176-00-A_1.jpg'],
    }
    payload.update(overrides)
    return payload


class FakeStore:
    """In-memory record store that records every call."""

    def __init__(self, records=None, fail_with=None):
        self.records = {r['slug']: dict(r) for r in records or []}
        self.fail_with = fail_with
        self.calls = []
        self.on_call = None

    def get_by_slug(self, slug):
        self.calls.append(('get_by_slug', slug))
        return self.records.get(slug)

    def create(self, payload):
        self.calls.append(('create', payload))
        if self.on_call:
            self.on_call()
        if self.fail_with:
            raise self.fail_with
        stored = dict(payload, id=f"id-{len(self.records) + 1}")
        self.records[stored['slug']] = stored
        return stored

    def update(self, product_id, payload):
        self.calls.append(('update', product_id, payload))
        if self.on_call:
            self.on_call()
        if self.fail_with:
            raise self.fail_with
        stored = dict(payload, id=product_id)
        self.records[stored['slug']] = stored
        return stored


class FakeUploader:
    """Uploader that fails for any file whose name is listed in ``failing``."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.uploaded = []

    def upload(self, file):
        if file.name in self.failing:
            raise UploadError(f"Invalid file type: {file.name}")
        self.uploaded.append(file.name)
        return f"/static/products/{file.name}"


def named_file(name, data=b"\x89PNG fake image bytes"):
    f = io.BytesIO(data)
    f.name = name
    return f


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def uploader():
    return FakeUploader()
