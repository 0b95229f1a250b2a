"""
Report lifecycle: auto approval, artifact generation and notification.
"""
import pytest

from app import events
from app.events import ReportWriteEvent
from app.extensions import db
from app.models import DailyReport
from app.services.lifecycle_service import on_report_written
from app.utils.outcome import FAILED, OK
from conftest import FailingCodeStore, png_bytes


def _transition(report, before, after):
    return ReportWriteEvent(
        company_id=report.company_id,
        report_id=report.id,
        before={"status": before} if before else None,
        after={"status": after} if after else None,
    )


@pytest.fixture()
def captured_writes(app, monkeypatch):
    """Enable the commit hook and capture dispatched events instead of queueing them."""
    captured = []
    monkeypatch.setitem(app.config, "REPORT_EVENTS_ENABLED", True)
    monkeypatch.setattr(events, "dispatch_report_write", captured.append)
    return captured


class TestAutoApprovalEndToEnd:
    def test_submitted_report_is_approved_rendered_and_mailed(
        self, site, make_report, collaborators, captured_writes
    ):
        report = make_report(site_id=site.id, status="submitted")
        captured_writes.clear()

        outcome = on_report_written(_transition(report, "draft", "submitted"), collaborators)
        assert outcome.status == OK

        report = db.session.get(DailyReport, report.id)
        assert report.status == "approved"
        assert report.approval["approved_by"] == "system"
        assert report.approval["approved_by_name"] == "自動承認"
        assert report.approval["auto_approved"] is True

        approved_writes = [w for w in captured_writes if w.after_status == "approved"]
        assert len(approved_writes) == 1
        approved = approved_writes[0]
        assert approved.before_status == "submitted"
        assert approved.report_id == report.id

        outcome = on_report_written(approved, collaborators)
        assert outcome.status == OK

        report = db.session.get(DailyReport, report.id)
        assert report.pdf_url.startswith("http://storage.test/o/companies%2F")
        assert "alt=media&token=" in report.pdf_url
        assert report.qr_code_url.endswith(collaborators.blob_store.objects[
            f"companies/{report.company_id}/reports/{report.id}/qrcode.png"][2])
        assert report.pdf_generated_at is not None

        assert len(collaborators.send_mail.sent) == 1
        mail = collaborators.send_mail.sent[0]
        assert mail["to"] == ["ops@x.com"]
        assert mail["subject"] == "【日報承認】新宿ビル改修 3月5日"
        assert "自動承認" in mail["body_text"]
        assert len(mail["attachments"]) == 1
        attachment = mail["attachments"][0]
        assert attachment["filename"] == "report_20260305.pdf"
        assert attachment["mimetype"] == "application/pdf"
        assert attachment["content"].startswith(b"%PDF")

        # Saving the URLs is a write with unchanged status
        followups = [w for w in captured_writes if w is not approved and w.report_id == report.id]
        assert followups
        assert all(not w.status_changed for w in followups)
        sent_before = len(collaborators.send_mail.sent)
        for write in followups:
            assert on_report_written(write, collaborators).status == OK
        assert len(collaborators.send_mail.sent) == sent_before


class TestSubmittedHandler:
    def test_manual_mode_leaves_report_submitted(self, make_report, collaborators):
        report = make_report(status="submitted")
        assert on_report_written(_transition(report, "draft", "submitted"), collaborators).status == OK
        assert db.session.get(DailyReport, report.id).status == "submitted"
        assert collaborators.blob_store.saves == []

    def test_stale_event_does_not_override_rejection(self, site, make_report, collaborators):
        report = make_report(site_id=site.id, status="rejected")
        on_report_written(_transition(report, "draft", "submitted"), collaborators)
        assert db.session.get(DailyReport, report.id).status == "rejected"

    def test_missing_report_fails_quietly(self, company, collaborators):
        write = ReportWriteEvent(company.id, 4242, {"status": "draft"}, {"status": "submitted"})
        assert on_report_written(write, collaborators).status == FAILED


class TestApprovedHandler:
    def test_images_are_fetched_and_broken_ones_skipped(self, company, make_report, collaborators):
        company.logo_url = "http://img.test/logo.png"
        db.session.commit()
        report = make_report(
            status="approved",
            client_signature={"image_url": "http://img.test/sig.png", "signer_name": "山本"},
        )
        collaborators.fetch_image.images["http://img.test/logo.png"] = png_bytes()
        collaborators.fetch_image.images["http://img.test/sig.png"] = b"broken"

        outcome = on_report_written(_transition(report, "submitted", "approved"), collaborators)

        assert outcome.status == OK
        assert collaborators.fetch_image.calls == ["http://img.test/logo.png", "http://img.test/sig.png"]
        assert db.session.get(DailyReport, report.id).pdf_url

    def test_manual_approval_mail_names_approver(self, make_report, collaborators):
        report = make_report(status="approved", approval={"approved_by": "u1", "approved_by_name": "高橋",
                                                          "auto_approved": False})
        on_report_written(_transition(report, "submitted", "approved"), collaborators)
        mail = collaborators.send_mail.sent[0]
        assert "以下の日報が承認されました。" in mail["body_text"]
        assert "高橋" in mail["body_text"]

    def test_no_recipients_skips_mail_but_keeps_artifacts(self, company, make_report, collaborators):
        company.approval_settings = {"mode": "manual", "auto_approval_emails": []}
        db.session.commit()
        report = make_report(status="approved")

        outcome = on_report_written(_transition(report, "submitted", "approved"), collaborators)

        assert outcome.status == OK
        assert collaborators.send_mail.sent == []
        assert db.session.get(DailyReport, report.id).pdf_url

    def test_storage_failure_is_swallowed(self, make_report, collaborators, monkeypatch):
        report = make_report(status="approved")

        def broken_save(*args, **kwargs):
            raise IOError("disk full")

        monkeypatch.setattr(collaborators.blob_store, "save", broken_save)

        outcome = on_report_written(_transition(report, "submitted", "approved"), collaborators)

        assert outcome.status == FAILED
        assert "disk full" in outcome.reason
        assert db.session.get(DailyReport, report.id).pdf_url is None
        assert collaborators.send_mail.sent == []

    def test_qr_failure_keeps_stored_document(self, make_report, collaborators):
        collaborators.blob_store = FailingCodeStore()
        report = make_report(status="approved")

        outcome = on_report_written(_transition(report, "submitted", "approved"), collaborators)

        assert outcome.status == FAILED
        assert "qr write failed" in outcome.reason
        document_path = f"companies/{report.company_id}/reports/{report.id}/report_20260305.pdf"
        assert collaborators.blob_store.saves == [document_path]
        assert collaborators.blob_store.objects[document_path][0].startswith(b"%PDF")
        report = db.session.get(DailyReport, report.id)
        assert report.pdf_url is None
        assert report.qr_code_url is None
        assert collaborators.send_mail.sent == []

    def test_mail_failure_keeps_artifacts(self, make_report, collaborators):
        collaborators.send_mail.result = False
        report = make_report(status="approved")

        outcome = on_report_written(_transition(report, "submitted", "approved"), collaborators)

        assert outcome.status == OK
        assert db.session.get(DailyReport, report.id).qr_code_url

    def test_rerun_overwrites_same_paths(self, make_report, collaborators):
        report = make_report(status="approved")
        write = _transition(report, "submitted", "approved")
        on_report_written(write, collaborators)
        first_url = db.session.get(DailyReport, report.id).pdf_url
        on_report_written(write, collaborators)

        assert len(set(collaborators.blob_store.saves)) == 2
        assert db.session.get(DailyReport, report.id).pdf_url != first_url


class TestGate:
    @pytest.mark.parametrize("before,after", [
        ("approved", "approved"),
        ("submitted", "submitted"),
        ("submitted", "rejected"),
        ("approved", "draft"),
        ("submitted", None),
    ])
    def test_no_side_effects(self, make_report, collaborators, before, after):
        report = make_report(status="submitted")
        outcome = on_report_written(_transition(report, before, after), collaborators)
        assert outcome.status == OK
        assert collaborators.blob_store.saves == []
        assert collaborators.send_mail.sent == []
        assert db.session.get(DailyReport, report.id).status == "submitted"
