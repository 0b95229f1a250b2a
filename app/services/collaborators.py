"""
External collaborators used by the report pipeline.

They are built once per app from configuration and handed to the services
explicitly, so tests can swap in fakes through ``app.extensions``.
"""
import os
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional

from flask import current_app

from app.services.blob_store import BlobStore, LocalBlobStore

EXTENSION_KEY = 'report_collaborators'


@dataclass
class Collaborators:
    blob_store: BlobStore
    send_mail: Callable[..., bool]
    fetch_image: Callable[[str], Optional[bytes]]
    timezone: str = 'Asia/Tokyo'


def build_collaborators(app) -> Collaborators:
    from app.services.email_service import send_email
    from app.utils.image_fetch import fetch_image

    storage_root = app.config['STORAGE_ROOT']
    if not os.path.isabs(storage_root):
        storage_root = os.path.join(app.config['PROJECT_ROOT'], storage_root)

    return Collaborators(
        blob_store=LocalBlobStore(storage_root, app.config['STORAGE_PUBLIC_ENDPOINT']),
        send_mail=send_email,
        fetch_image=partial(fetch_image, timeout=app.config['IMAGE_FETCH_TIMEOUT']),
        timezone=app.config['REPORT_TIMEZONE'],
    )


def init_collaborators(app):
    app.extensions[EXTENSION_KEY] = build_collaborators(app)


def get_collaborators() -> Collaborators:
    return current_app.extensions[EXTENSION_KEY]
