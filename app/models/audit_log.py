"""
Audit log for approve, reject, regenerate and export actions.
"""
from app.extensions import db
from datetime import datetime


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=True, index=True)
    entity_type = db.Column(db.String(64), nullable=False, index=True)  # daily_report, export
    entity_id = db.Column(db.String(64), nullable=True, index=True)
    action = db.Column(db.String(32), nullable=False, index=True)  # submit, approve, reject, regenerate, export
    user_id = db.Column(db.String(128), nullable=True, index=True)  # JWT identity
    details = db.Column(db.Text, nullable=True)  # JSON
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
