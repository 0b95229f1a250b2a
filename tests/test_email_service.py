"""
Approval notice composition and SMTP delivery.
"""
from datetime import datetime
from email import message_from_string
from types import SimpleNamespace

import pytest
import requests

from app.services import email_service
from app.services.email_service import build_approval_email, send_email
from app.utils.image_fetch import fetch_image


def _report(**overrides):
    values = dict(
        site_name="新宿ビル改修",
        report_date=datetime(2026, 3, 5),
        created_by_name="佐藤",
        workers=[{"name": "田中"}, {"name": "鈴木"}],
        approval={"approved_by_name": "高橋", "auto_approved": False},
    )
    values.update(overrides)
    return SimpleNamespace(**values)


COMPANY = SimpleNamespace(display_name="山田建設 東京支店")


class TestBuildApprovalEmail:
    def test_manual_approval(self):
        subject, text, html = build_approval_email(_report(), COMPANY, False, "http://storage.test/o/x")
        assert subject == "【日報承認】新宿ビル改修 3月5日"
        assert "以下の日報が承認されました。" in text
        assert "■ 承認者: 高橋" in text
        assert "■ 作業員数: 2名" in text
        assert "http://storage.test/o/x" in html

    def test_auto_approval_omits_approver(self):
        _, text, _ = build_approval_email(_report(), COMPANY, True)
        assert "以下の日報が自動承認されました。" in text
        assert "承認者" not in text

    def test_html_escapes_report_values(self):
        report = _report(site_name="<b>現場</b>", created_by_name="佐藤 & 鈴木")
        _, text, html = build_approval_email(report, COMPANY, False, "http://storage.test/o/x?alt=media&token=\"t")
        assert "<b>現場</b>" not in html
        assert "&lt;b&gt;現場&lt;/b&gt;" in html
        assert "佐藤 &amp; 鈴木" in html
        assert 'href="http://storage.test/o/x?alt=media&amp;token=&#34;t"' in html
        assert "<b>現場</b>" in text


class FakeSMTP:
    instances = []

    def __init__(self, host, port):
        self.host, self.port = host, port
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        self.user = user

    def sendmail(self, sender, recipients, message):
        self.messages.append((sender, recipients, message))


class TestSendEmail:
    def test_not_configured(self):
        assert send_email(["ops@x.com"], "s", "b") is False

    def test_no_recipients(self):
        assert send_email([], "s", "b") is False

    def test_sends_with_attachment(self, app, monkeypatch):
        FakeSMTP.instances.clear()
        monkeypatch.setitem(app.config, "MAIL_USERNAME", "mailer")
        monkeypatch.setitem(app.config, "MAIL_PASSWORD", "secret")
        monkeypatch.setattr(email_service.smtplib, "SMTP", FakeSMTP)

        ok = send_email(
            ["ops@x.com", "boss@x.com"], "件名", "本文", "<p>本文</p>",
            attachments=[{"filename": "report_20260305.pdf", "content": b"%PDF", "mimetype": "application/pdf"}],
        )

        assert ok is True
        sender, recipients, raw = FakeSMTP.instances[0].messages[0]
        assert recipients == ["ops@x.com", "boss@x.com"]
        parsed = message_from_string(raw)
        attachments = [p for p in parsed.walk() if p.get_filename()]
        assert [p.get_filename() for p in attachments] == ["report_20260305.pdf"]
        assert attachments[0].get_payload(decode=True) == b"%PDF"

    def test_smtp_error_returns_false(self, app, monkeypatch):
        class BrokenSMTP(FakeSMTP):
            def login(self, user, password):
                raise OSError("connection refused")

        monkeypatch.setitem(app.config, "MAIL_USERNAME", "mailer")
        monkeypatch.setitem(app.config, "MAIL_PASSWORD", "secret")
        monkeypatch.setattr(email_service.smtplib, "SMTP", BrokenSMTP)
        assert send_email(["ops@x.com"], "s", "b") is False


class FakeHttp:
    def __init__(self, status_code=200, content=b"img", error=None):
        self.status_code, self.content, self.error = status_code, content, error
        self.calls = []

    def get(self, url, timeout):
        self.calls.append((url, timeout))
        if self.error:
            raise self.error
        return SimpleNamespace(status_code=self.status_code, content=self.content)


class TestFetchImage:
    def test_ok(self):
        http = FakeHttp()
        assert fetch_image("http://img.test/a.png", timeout=3, session=http) == b"img"
        assert http.calls == [("http://img.test/a.png", 3)]

    @pytest.mark.parametrize("http", [
        FakeHttp(status_code=404),
        FakeHttp(error=requests.ConnectionError("down")),
        FakeHttp(error=requests.Timeout("slow")),
    ])
    def test_failures_return_none(self, http):
        assert fetch_image("http://img.test/a.png", session=http) is None

    def test_empty_url(self):
        assert fetch_image("") is None
