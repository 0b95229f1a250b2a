"""
Site Model
A work location under a company, with optional policy overrides
"""
from app.extensions import db
from .base import TimestampMixin


class Site(db.Model, TimestampMixin):
    __tablename__ = 'sites'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)

    site_name = db.Column(db.String(200), nullable=False)
    client_id = db.Column(db.String(64))
    client_name = db.Column(db.String(200))  # prime contractor, printed on the PDF
    address = db.Column(db.String(255))
    status = db.Column(db.String(20), default='pending')  # pending, active, completed

    # None = inherit company settings. mode may also be "default" (inherit).
    approval_settings = db.Column(db.JSON)
    attendance_settings = db.Column(db.JSON)
