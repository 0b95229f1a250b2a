"""
Daily Report Model
A day's work record for one site, moving through draft → submitted → approved/rejected
"""
from sqlalchemy.orm import column_property
from app.extensions import db
from .base import TimestampMixin

REPORT_STATUSES = ('draft', 'submitted', 'approved', 'rejected')


class DailyReport(db.Model, TimestampMixin):
    """
    Daily report with its worker table and generated artifact URLs
    """
    __tablename__ = 'daily_reports'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False, index=True)
    site_id = db.Column(db.Integer, db.ForeignKey('sites.id'), nullable=True, index=True)
    site_name = db.Column(db.String(200))  # denormalized for listing and PDF

    # Old value must be loaded on change so the write hook can see the transition
    status = column_property(
        db.Column(db.String(20), default='draft', nullable=False, index=True),
        active_history=True,
    )

    report_date = db.Column(db.DateTime, nullable=False, index=True)  # local midnight of the work day
    submitted_at = db.Column(db.DateTime)  # UTC
    created_by_name = db.Column(db.String(100))
    weather = db.Column(db.String(50))

    # [{"name", "start_time", "end_time", "no_lunch_break", "remarks", "employee_id"}]
    workers = db.Column(db.JSON, default=list)
    notes = db.Column(db.Text)

    # {"image_url", "signer_name", "signed_at"}
    client_signature = db.Column(db.JSON)
    # {"approved_by", "approved_by_name", "approved_at", "auto_approved"}
    approval = db.Column(db.JSON)
    # {"rejected_by", "rejected_by_name", "rejected_at", "reason"}
    rejection = db.Column(db.JSON)

    # Generated artifacts
    pdf_url = db.Column(db.String(1000))
    qr_code_url = db.Column(db.String(1000))
    pdf_generated_at = db.Column(db.DateTime)

    site = db.relationship('Site', lazy=True)

    @property
    def signature_url(self):
        return (self.client_signature or {}).get('image_url')

    @property
    def is_auto_approved(self):
        return bool((self.approval or {}).get('auto_approved'))

    def snapshot(self):
        """Minimal state carried by write events"""
        return {
            'id': self.id,
            'company_id': self.company_id,
            'site_id': self.site_id,
            'status': self.status,
        }

    def to_dict(self):
        """Convert report to dictionary"""
        return {
            'id': self.id,
            'company_id': self.company_id,
            'site_id': self.site_id,
            'site_name': self.site_name,
            'status': self.status,
            'report_date': self.report_date.isoformat() if self.report_date else None,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
            'created_by_name': self.created_by_name,
            'weather': self.weather,
            'workers': self.workers or [],
            'notes': self.notes,
            'client_signature': self.client_signature,
            'approval': self.approval,
            'rejection': self.rejection,
            'pdf_url': self.pdf_url,
            'qr_code_url': self.qr_code_url,
            'pdf_generated_at': self.pdf_generated_at.isoformat() if self.pdf_generated_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
