"""
Product image uploads stored in the application's static folder.
"""

import os

from ...core import Config, get_config_value
from ...core.storage import ALLOWED_IMAGE_EXTENSIONS, file_extension, unique_filename, upload_file
from .exceptions import UploadError


def check_image(filename, size, max_bytes):
    """Raise UploadError unless ``filename``/``size`` describe an acceptable image"""
    if not filename:
        raise UploadError('No file selected')
    if file_extension(filename) not in ALLOWED_IMAGE_EXTENSIONS:
        raise UploadError(f"Invalid file type: {filename}")
    if size == 0:
        raise UploadError(f"Empty file: {filename}")
    if size > max_bytes:
        raise UploadError(f"File too large: {filename} ({size} bytes, max {max_bytes})")


def _read(file):
    """Bytes and filename from a werkzeug FileStorage or an open binary file"""
    filename = getattr(file, 'filename', None) or os.path.basename(getattr(file, 'name', '') or '')
    stream = getattr(file, 'stream', file)
    data = stream.read()
    return filename, data


class LocalAssetUploader:
    """Asset uploader that writes into <static>/<UPLOAD_SUBFOLDER>.

    Must be used inside a Flask app context.
    """

    def __init__(self, subfolder=None, max_bytes=None):
        self.subfolder = subfolder
        self.max_bytes = max_bytes

    def upload(self, file):
        subfolder = self.subfolder or get_config_value('UPLOAD_SUBFOLDER', Config.UPLOAD_SUBFOLDER)
        max_bytes = int(self.max_bytes or get_config_value('MAX_UPLOAD_BYTES', Config.MAX_UPLOAD_BYTES))

        try:
            filename, data = _read(file)
        except OSError as e:
            raise UploadError(f"Could not read upload: {e}") from e
        check_image(filename, len(data), max_bytes)

        try:
            return upload_file(data, unique_filename(filename), subfolder)
        except (OSError, RuntimeError) as e:
            # RuntimeError: no application context, so no static folder
            raise UploadError(f"Could not store {filename}: {e}") from e
