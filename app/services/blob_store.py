"""
Blob Store
Durable object storage for generated artifacts. Objects are addressed by path
and fetched publicly through capability-token URLs:

    {endpoint}/{quoted path}?alt=media&token={download_token}
"""
import hmac
import os
import logging
import uuid
from datetime import datetime
from urllib.parse import quote

from app.extensions import db
from app.models import StoredObject

logger = logging.getLogger(__name__)


def new_download_token() -> str:
    """Random capability token embedded in download URLs"""
    return str(uuid.uuid4())


def build_download_url(endpoint, path, token) -> str:
    return f"{endpoint.rstrip('/')}/{quote(path, safe='')}?alt=media&token={token}"


class BlobStore:
    """Interface for artifact storage"""

    def __init__(self, endpoint):
        self.endpoint = endpoint

    def save(self, path, data, content_type, download_token) -> StoredObject:
        raise NotImplementedError

    def read(self, path, download_token):
        """Return (bytes, content_type) when the token matches, else None"""
        raise NotImplementedError

    def public_url(self, path, download_token) -> str:
        return build_download_url(self.endpoint, path, download_token)


class LocalBlobStore(BlobStore):
    """Bytes on the local filesystem, metadata in the stored_objects table"""

    def __init__(self, root, endpoint):
        super().__init__(endpoint)
        self.root = os.path.abspath(root)

    def _file_path(self, path):
        if not path or path.startswith('/') or '..' in path.split('/'):
            raise ValueError(f"Invalid object path: {path!r}")
        full_path = os.path.abspath(os.path.join(self.root, path))
        if not full_path.startswith(self.root + os.sep):
            raise ValueError(f"Invalid object path: {path!r}")
        return full_path

    def save(self, path, data, content_type, download_token) -> StoredObject:
        full_path = self._file_path(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True, mode=0o755)

        tmp_path = f"{full_path}.tmp"
        with open(tmp_path, 'wb') as f:
            f.write(data)
        os.replace(tmp_path, full_path)

        obj = db.session.get(StoredObject, path)
        if obj is None:
            obj = StoredObject(path=path)
            db.session.add(obj)
        obj.content_type = content_type
        obj.download_token = download_token
        obj.size = len(data)
        obj.updated_at = datetime.utcnow()
        db.session.commit()

        logger.info(f"Stored object {path} ({len(data)} bytes)")
        return obj

    def read(self, path, download_token):
        obj = db.session.get(StoredObject, path)
        if obj is None or not download_token or not hmac.compare_digest(obj.download_token, download_token):
            return None
        try:
            full_path = self._file_path(path)
        except ValueError:
            return None
        if not os.path.exists(full_path):
            logger.warning(f"Stored object {path} has metadata but no file")
            return None
        with open(full_path, 'rb') as f:
            return f.read(), obj.content_type
