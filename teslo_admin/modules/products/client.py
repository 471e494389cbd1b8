"""
Admin API Client
================

Record store and asset uploader adapters that talk to the admin HTTP API
(``/api/admin/products`` and ``/api/admin/upload``) so the form controller
can run outside the server process.
"""

import os
import requests
from typing import Any, Dict, List, Optional

from ...core import Config, get_config_value
from .exceptions import ConflictError, NotFoundError, StoreError, UploadError, ValidationError


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if not isinstance(body, dict):
        return f"HTTP {response.status_code}"
    return body.get('error') or body.get('message') or f"HTTP {response.status_code}"


class AdminApiSession:
    """Shared base URL, timeout and ``requests.Session`` for the adapters"""

    def __init__(self, base_url: str = None, timeout: float = None, session: requests.Session = None):
        self.base_url = (base_url or get_config_value('ADMIN_API_URL', Config.ADMIN_API_URL)).rstrip('/')
        self.timeout = timeout or float(get_config_value('ADMIN_API_TIMEOUT', Config.ADMIN_API_TIMEOUT))
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        return self.session.request(method, self.url(path), timeout=self.timeout, **kwargs)


class ApiProductStore:
    """Product store backed by the admin HTTP API"""

    def __init__(self, api: AdminApiSession = None):
        self.api = api or AdminApiSession()

    def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Send one request and return the decoded JSON object body"""
        try:
            response = self.api.request(method, path, **kwargs)
        except requests.RequestException as e:
            raise StoreError(f"{method} {path} failed: {e}") from e

        if response.status_code == 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            errors = body.get('errors') if isinstance(body, dict) else None
            raise ValidationError(errors if isinstance(errors, dict) and errors else _error_message(response))
        if response.status_code == 404:
            raise NotFoundError(_error_message(response))
        if response.status_code == 409:
            raise ConflictError(_error_message(response))
        if response.status_code >= 400:
            raise StoreError(f"{method} {path} returned {response.status_code}: {_error_message(response)}")

        try:
            body = response.json()
        except ValueError as e:
            raise StoreError(f"{method} {path} returned a non-JSON body") from e
        if not isinstance(body, dict):
            raise StoreError(f"{method} {path} returned an unexpected body")
        return body

    def get_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        try:
            body = self._call('GET', f'admin/products/{slug}')
        except NotFoundError:
            return None
        return body.get('product')

    def get_all(self) -> List[Dict[str, Any]]:
        return self._call('GET', 'admin/products').get('products', [])

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._call('POST', 'admin/products', json=payload).get('product')

    def update(self, product_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = dict(payload, id=product_id)
        return self._call('PUT', 'admin/products', json=body).get('product')


class ApiAssetUploader:
    """Posts one file to ``/api/admin/upload`` and returns its stored reference"""

    field_name = 'img'

    def __init__(self, api: AdminApiSession = None):
        self.api = api or AdminApiSession()

    def upload(self, file) -> str:
        filename = getattr(file, 'filename', None) or os.path.basename(getattr(file, 'name', '') or 'upload')
        stream = getattr(file, 'stream', file)

        try:
            response = self.api.request('POST', 'admin/upload', files={self.field_name: (filename, stream)})
        except OSError as e:  # includes requests.RequestException and stream read errors
            raise UploadError(f"Upload of {filename} failed: {e}") from e

        if response.status_code >= 400:
            raise UploadError(_error_message(response))

        try:
            body = response.json()
        except ValueError:
            body = None
        reference = body.get('message') if isinstance(body, dict) else None
        if not reference:
            raise UploadError(f"Upload of {filename} returned no reference")
        return reference
