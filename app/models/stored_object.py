"""
Metadata for objects written to the blob store.
The download token is the capability embedded in the public URL.
"""
from datetime import datetime
from app.extensions import db


class StoredObject(db.Model):
    __tablename__ = 'stored_objects'

    path = db.Column(db.String(500), primary_key=True)
    content_type = db.Column(db.String(100), nullable=False)
    download_token = db.Column(db.String(64), nullable=False)
    size = db.Column(db.Integer, default=0)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
