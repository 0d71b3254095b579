"""
Image uploads to the configured blob storage.

Files are validated before storage is touched; storage failures are
raised as UploadError so views can answer with a 502.
"""
import logging
import os
import time
from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.text import get_valid_filename
from rest_framework import serializers

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """The blob store rejected or failed to persist a file"""


def validate_image_upload(upload):
    """Reject non-image or oversized files"""
    content_type = getattr(upload, 'content_type', '') or ''
    if not content_type.startswith('image/'):
        raise serializers.ValidationError(f'{upload.name} is not a valid image file')

    if upload.size > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise serializers.ValidationError(f'{upload.name} is too large. Maximum {limit_mb}MB')

    return upload


def save_upload(upload, folder):
    """
    Save an already validated upload under folder and return its storage name.
    The file name is prefixed with a millisecond timestamp.
    """
    filename = f"{int(time.time() * 1000)}_{get_valid_filename(os.path.basename(upload.name))}"
    path = f"{folder.rstrip('/')}/{filename}"

    try:
        saved_name = default_storage.save(path, upload)
    except Exception as e:
        logger.error(f"Failed to upload {upload.name} to {path}: {e}")
        raise UploadError(f'Could not upload {upload.name}') from e

    logger.info(f"Uploaded {upload.name} to {saved_name}")
    return saved_name


def upload_url(saved_name, request=None):
    url = default_storage.url(saved_name)
    if request is not None:
        url = request.build_absolute_uri(url)
    return url


def discard_upload(saved_name):
    try:
        default_storage.delete(saved_name)
    except Exception as e:
        logger.error(f"Could not remove {saved_name} after a failed upload: {e}")


def store_upload(upload, folder, request=None):
    """Save one upload and return its public URL"""
    return upload_url(save_upload(upload, folder), request)


def store_uploads(uploads, folder, request=None):
    """
    Save several uploads and return their public URLs, in order.
    If one fails, the files saved before it are removed again and
    UploadError is raised.
    """
    saved = []
    try:
        for upload in uploads:
            saved.append(save_upload(upload, folder))
    except UploadError:
        for saved_name in saved:
            discard_upload(saved_name)
        raise
    return [upload_url(saved_name, request) for saved_name in saved]


def product_image_folder(store):
    return f"products/{store.pk}"


def store_logo_folder(store):
    return f"stores/{store.pk}/logo"
