"""
Shared pytest fixtures for the labor report test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - collaborators: in-memory blob store, mailer and image fetch
    - company / site / make_report: pre-created entities
    - auth_headers: Bearer header factory for JWT-protected routes
"""
import io
from datetime import datetime

import pytest
from flask_jwt_extended import create_access_token
from PIL import Image

from app import create_app
from app.extensions import db as _db
from app.models import Company, DailyReport, Site
from app.services.blob_store import BlobStore
from app.services.collaborators import EXTENSION_KEY, Collaborators


# ── Fakes ────────────────────────────────────────────────────────────────


class MemoryBlobStore(BlobStore):
    """Blob store keeping objects in a dict."""

    def __init__(self, endpoint="http://storage.test/o"):
        super().__init__(endpoint)
        self.objects = {}
        self.saves = []

    def save(self, path, data, content_type, download_token):
        self.objects[path] = (data, content_type, download_token)
        self.saves.append(path)

    def read(self, path, download_token):
        stored = self.objects.get(path)
        if stored is None or stored[2] != download_token:
            return None
        return stored[0], stored[1]


class FailingCodeStore(MemoryBlobStore):
    """Blob store whose QR code writes fail."""

    def save(self, path, data, content_type, download_token):
        if path.endswith("/qrcode.png"):
            raise IOError("qr write failed")
        super().save(path, data, content_type, download_token)


class RecordingMailer:
    """send_mail stand-in recording every call."""

    def __init__(self, result=True):
        self.result = result
        self.sent = []

    def __call__(self, to_emails, subject, body_text, body_html=None, attachments=None):
        self.sent.append({
            "to": list(to_emails),
            "subject": subject,
            "body_text": body_text,
            "body_html": body_html,
            "attachments": attachments or [],
        })
        return self.result


class StaticImageFetcher:
    """fetch_image stand-in serving bytes by URL."""

    def __init__(self, images=None):
        self.images = dict(images or {})
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        return self.images.get(url)


def png_bytes(size=(40, 20), color=(200, 30, 30, 255)):
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def collaborators(app):
    """Swap the app's collaborators for in-memory fakes for one test."""
    original = app.extensions[EXTENSION_KEY]
    fakes = Collaborators(
        blob_store=MemoryBlobStore(),
        send_mail=RecordingMailer(),
        fetch_image=StaticImageFetcher(),
        timezone="Asia/Tokyo",
    )
    app.extensions[EXTENSION_KEY] = fakes
    yield fakes
    app.extensions[EXTENSION_KEY] = original


# ── Entity fixtures ──────────────────────────────────────────────────────


@pytest.fixture()
def company():
    c = Company(
        company_code="AB12CD34",
        company_name="山田建設",
        branch="東京支店",
        email="info@yamada.example",
        approval_settings={"mode": "manual", "auto_approval_emails": ["ops@x.com"]},
    )
    _db.session.add(c)
    _db.session.commit()
    return c


@pytest.fixture()
def site(company):
    s = Site(
        company_id=company.id,
        site_name="新宿ビル改修",
        client_name="大手ゼネコン株式会社",
        approval_settings={"mode": "auto", "auto_approval_emails": []},
    )
    _db.session.add(s)
    _db.session.commit()
    return s


@pytest.fixture()
def make_report(company):
    """Factory creating a committed DailyReport."""

    def _make(**overrides):
        values = {
            "company_id": company.id,
            "site_name": "新宿ビル改修",
            "status": "draft",
            "report_date": datetime(2026, 3, 5),
            "created_by_name": "佐藤",
            "workers": [
                {"name": "田中", "start_time": "08:00", "end_time": "17:00", "no_lunch_break": False},
                {"name": "鈴木", "start_time": "09:00", "end_time": "18:00", "no_lunch_break": True},
            ],
            "notes": "資材搬入あり",
        }
        values.update(overrides)
        report = DailyReport(**values)
        _db.session.add(report)
        _db.session.commit()
        return report

    return _make


@pytest.fixture()
def auth_headers(app):
    """Factory building Authorization headers for a company/role."""

    def _headers(company_id, role="admin", identity="user-1", name="管理者"):
        with app.app_context():
            token = create_access_token(
                identity=identity,
                additional_claims={"company_id": company_id, "role": role, "name": name},
            )
        return {"Authorization": f"Bearer {token}"}

    return _headers
