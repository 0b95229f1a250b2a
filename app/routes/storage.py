"""
Public download endpoint for stored artifacts.
Access is granted by the token embedded in the URL, not by a session.
"""
import io
import logging

from flask import Blueprint, request, send_file

from app.services.collaborators import get_collaborators
from app.utils.errors import NotFound

logger = logging.getLogger(__name__)

storage_bp = Blueprint('storage', __name__, url_prefix='/storage')


@storage_bp.route('/o/<path:object_path>', methods=['GET'])
def download_object(object_path):
    """
    Serve one stored object

    Query params:
        alt: must be "media"
        token: download token issued with the object
    """
    if request.args.get('alt') != 'media':
        raise NotFound()

    found = get_collaborators().blob_store.read(object_path, request.args.get('token'))
    if found is None:
        logger.info(f"Rejected download of {object_path}")
        raise NotFound()

    data, content_type = found
    return send_file(
        io.BytesIO(data),
        mimetype=content_type,
        download_name=object_path.rsplit('/', 1)[-1],
    )
