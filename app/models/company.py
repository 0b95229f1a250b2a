"""
Company Model for Multi-Tenant Support
Each company is a separate tenant owning its sites and daily reports.
"""
from app.extensions import db
from .base import TimestampMixin


class Company(db.Model, TimestampMixin):
    """Company model - each company is a separate tenant"""
    __tablename__ = 'companies'

    id = db.Column(db.Integer, primary_key=True)
    company_code = db.Column(db.String(8), unique=True, nullable=False, index=True)
    company_name = db.Column(db.String(100), nullable=False)
    branch = db.Column(db.String(100))
    email = db.Column(db.String(120))

    # Branding for generated PDFs
    logo_url = db.Column(db.String(1000))

    # {"mode": "manual" | "auto", "auto_approval_emails": [...]}
    approval_settings = db.Column(db.JSON)
    # {"deduct_lunch_break": true, "lunch_break_minutes": 60}
    attendance_settings = db.Column(db.JSON)

    sites = db.relationship('Site', backref='company', lazy='dynamic')

    @property
    def display_name(self):
        """Company name followed by branch, as printed on report headers"""
        if self.branch:
            return f"{self.company_name} {self.branch}"
        return self.company_name or ''
