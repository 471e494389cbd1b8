"""
Storage Utility
===============

Shared file upload into the application's static folder.
"""

import os
import uuid
from flask import current_app


ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif'}


def file_extension(filename):
    """Lower-cased extension without the dot, or '' if there is none"""
    return filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''


def unique_filename(filename):
    """Random hex name that keeps the original extension"""
    ext = file_extension(filename)
    return f"{uuid.uuid4().hex}.{ext}" if ext else uuid.uuid4().hex


def upload_file(file_bytes, filename, subfolder):
    """Save file bytes under the static folder.

    Args:
        file_bytes: Raw bytes of the file.
        filename: Target filename (e.g. "abc123.jpg").
        subfolder: Subfolder name (e.g. "products").

    Returns:
        Local path like "/static/products/abc123.jpg".
    """
    upload_dir = os.path.join(current_app.static_folder, subfolder)
    os.makedirs(upload_dir, exist_ok=True)
    filepath = os.path.join(upload_dir, filename)
    with open(filepath, 'wb') as f:
        f.write(file_bytes)
    return f"/static/{subfolder}/{filename}"
