"""
Report PDF rendering and image embedding.
"""
from datetime import datetime
from types import SimpleNamespace

from reportlab.pdfgen import canvas

from app.utils.outcome import DEGRADED, OK
from app.utils.pdf_utils import embed_image, load_image, render_report_pdf
from conftest import png_bytes


def _report(**overrides):
    values = dict(
        site_name="新宿ビル改修",
        report_date=datetime(2026, 3, 5),
        submitted_at=datetime(2026, 3, 5, 9, 30),
        created_by_name="佐藤",
        workers=[
            {"name": "田中", "start_time": "08:00", "end_time": "17:00", "no_lunch_break": False},
            {"name": "鈴木", "start_time": "09:00", "end_time": "18:00", "no_lunch_break": True},
        ],
        notes="資材搬入あり\n午後は雨天のため屋内作業",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


COMPANY = SimpleNamespace(display_name="山田建設 東京支店")


class TestRenderReportPdf:
    def test_produces_pdf(self):
        pdf = render_report_pdf(_report(), COMPANY)
        assert pdf.startswith(b"%PDF")
        assert pdf.rstrip().endswith(b"%%EOF")

    def test_is_deterministic_without_images(self):
        first = render_report_pdf(_report(), COMPANY, client_name="大手ゼネコン")
        second = render_report_pdf(_report(), COMPANY, client_name="大手ゼネコン")
        assert first == second

    def test_content_changes_output(self):
        assert render_report_pdf(_report(), COMPANY) != render_report_pdf(_report(notes="別の内容"), COMPANY)

    def test_broken_images_do_not_fail_render(self):
        pdf = render_report_pdf(_report(), COMPANY, signature_image=b"not an image", logo_image=b"\x89PNG")
        assert pdf.startswith(b"%PDF")

    def test_valid_images_are_embedded(self):
        plain = render_report_pdf(_report(), COMPANY)
        with_images = render_report_pdf(_report(), COMPANY, signature_image=png_bytes(), logo_image=png_bytes())
        assert with_images.startswith(b"%PDF")
        assert len(with_images) > len(plain)

    def test_more_than_nine_workers_and_missing_fields(self):
        workers = [{"name": f"作業員{i}", "start_time": "08:00", "end_time": "17:00"} for i in range(12)]
        workers.append({})
        pdf = render_report_pdf(
            _report(workers=workers, notes=None, submitted_at=None, site_name=None, created_by_name=None),
            None,
        )
        assert pdf.startswith(b"%PDF")

    def test_long_notes_are_clipped(self):
        pdf = render_report_pdf(_report(notes="長文" * 2000), COMPANY)
        assert pdf.startswith(b"%PDF")


class TestImages:
    def test_load_image_converts_transparency_to_rgb(self):
        outcome = load_image(png_bytes())
        assert outcome.status == OK
        assert outcome.value.mode == "RGB"

    def test_load_image_rejects_garbage(self):
        assert load_image(b"garbage").status == DEGRADED

    def test_load_image_without_data(self):
        assert load_image(None).status == DEGRADED

    def test_embed_image_reports_degraded(self, tmp_path):
        c = canvas.Canvas(str(tmp_path / "x.pdf"))
        assert embed_image(c, None, 0, 0, 10, 10, label="logo").status == DEGRADED
        assert embed_image(c, b"garbage", 0, 0, 10, 10, label="logo").status == DEGRADED
        assert embed_image(c, png_bytes(), 0, 0, 10, 10, label="logo").status == OK
