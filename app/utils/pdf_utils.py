"""
PDF Generation Utilities using ReportLab

One renderer for every caller (approval pipeline, manual regeneration, bulk
export). The layout is a fixed A4 grid drawn on a canvas; nothing paginates.
"""
import io
import logging

from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas

from app.utils.i18n import get_translation, to_local, format_month_day
from app.utils.outcome import Outcome
from app.utils.time_calc import compute_worked_duration, DEFAULT_LUNCH_POLICY

logger = logging.getLogger(__name__)

FONT = 'HeiseiKakuGo-W5'
CHECK_FONT = 'ZapfDingbats'
CHECK_GLYPH = '4'  # heavy check mark in ZapfDingbats

pdfmetrics.registerFont(UnicodeCIDFont(FONT))

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 40
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN

LOGO_BOX = 44
SIGNATURE_BOX = (180, 32)

CONFIRM_TOP = 100
CONFIRM_ROW1_HEIGHT = 40
CONFIRM_ROW2_HEIGHT = 26
CONFIRM_LABEL_WIDTH = 60
CONFIRM_SIGNATURE_WIDTH = 200

CLIENT_BASELINE = 190
SITE_BASELINE = 210

TABLE_TOP = 224
TABLE_HEADER_HEIGHT = 22
TABLE_ROW_HEIGHT = 26
TABLE_ROWS = 9
# (label key, width); remarks takes the remaining width
TABLE_COLUMNS = (
    ('worker_name', 130),
    ('start_time', 55),
    ('end_time', 55),
    ('worked', 55),
    ('no_lunch_break', 60),
    ('remarks', None),
)
CHECKBOX_SIZE = 10

NOTES_LABEL_BASELINE = 500
NOTES_TOP = 508
NOTES_HEIGHT = 200
NOTES_FONT_SIZE = 10
NOTES_LEADING = 14
NOTES_PADDING = 6


def _y(top):
    """Convert a distance from the top edge into canvas coordinates"""
    return PAGE_HEIGHT - top


def _column_widths():
    fixed = sum(w for _, w in TABLE_COLUMNS if w)
    return [w if w else CONTENT_WIDTH - fixed for _, w in TABLE_COLUMNS]


def _fit_text(text, font_size, max_width):
    """Truncate text with an ellipsis so it fits in max_width"""
    text = str(text or '')
    if pdfmetrics.stringWidth(text, FONT, font_size) <= max_width:
        return text
    while text and pdfmetrics.stringWidth(text + '…', FONT, font_size) > max_width:
        text = text[:-1]
    return text + '…'


def _wrap_text(text, font_size, max_width):
    """Character-level wrapping; Japanese text has no spaces to break on"""
    lines = []
    for paragraph in (text or '').splitlines():
        line = ''
        for ch in paragraph:
            if line and pdfmetrics.stringWidth(line + ch, FONT, font_size) > max_width:
                lines.append(line)
                line = ch
            else:
                line += ch
        lines.append(line)
    return lines


def load_image(data):
    """Decode image bytes into an RGB PIL image; transparent areas become white"""
    if not data:
        return Outcome.degraded('no image data')
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        if img.mode in ('RGBA', 'LA', 'P'):
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            img = background
        elif img.mode != 'RGB':
            img = img.convert('RGB')
        return Outcome.ok(img)
    except Exception as e:
        return Outcome.degraded(f'cannot decode image: {e}')


def embed_image(c, data, x, y, width, height, label='image'):
    """
    Draw an image fitted (aspect preserved, centered) into a box.

    Never raises: a missing or broken image is reported as degraded and the
    layout continues without it.
    """
    if not data:
        return Outcome.degraded(f'{label}: not provided')
    loaded = load_image(data)
    if not loaded.is_ok:
        logger.warning(f"Skipping {label}: {loaded.reason}")
        return loaded
    try:
        c.drawImage(
            ImageReader(loaded.value), x, y, width=width, height=height,
            preserveAspectRatio=True, anchor='c',
        )
        return Outcome.ok()
    except Exception as e:
        logger.warning(f"Skipping {label}: embed failed: {e}", exc_info=True)
        return Outcome.degraded(f'{label}: embed failed: {e}')


def _draw_header(c, company, logo_image, submitted_at, tz_name):
    top = 40
    name_x = MARGIN
    if logo_image:
        logo = embed_image(c, logo_image, MARGIN, _y(top + LOGO_BOX), LOGO_BOX, LOGO_BOX, label='logo')
        if logo.is_ok:
            name_x = MARGIN + LOGO_BOX + 8

    c.setFont(FONT, 14)
    display_name = getattr(company, 'display_name', '') if company is not None else ''
    c.drawString(name_x, _y(top + 28), _fit_text(display_name, 14, 320))

    c.setFont(FONT, 10)
    submitted_label = format_month_day(to_local(submitted_at, tz_name))
    c.drawRightString(
        PAGE_WIDTH - MARGIN, _y(top + 28),
        f"{get_translation('report_date')}: {submitted_label}",
    )


def _draw_confirmation(c, report, signature_image):
    top = CONFIRM_TOP
    row1_bottom = top + CONFIRM_ROW1_HEIGHT
    row2_bottom = row1_bottom + CONFIRM_ROW2_HEIGHT
    x0 = MARGIN
    x1 = x0 + CONFIRM_LABEL_WIDTH
    x2 = x1 + CONFIRM_SIGNATURE_WIDTH
    x3 = x2 + CONFIRM_LABEL_WIDTH
    x_end = MARGIN + CONTENT_WIDTH

    c.setLineWidth(0.8)
    c.rect(x0, _y(row2_bottom), CONTENT_WIDTH, CONFIRM_ROW1_HEIGHT + CONFIRM_ROW2_HEIGHT)
    c.line(x0, _y(row1_bottom), x_end, _y(row1_bottom))
    c.line(x1, _y(top), x1, _y(row2_bottom))
    c.line(x2, _y(top), x2, _y(row1_bottom))
    c.line(x3, _y(top), x3, _y(row1_bottom))

    c.setFont(FONT, 10)
    row1_text_y = _y(top + CONFIRM_ROW1_HEIGHT / 2 + 4)
    row2_text_y = _y(row1_bottom + CONFIRM_ROW2_HEIGHT / 2 + 4)
    c.drawCentredString(x0 + CONFIRM_LABEL_WIDTH / 2, row1_text_y, get_translation('confirmation'))
    c.drawCentredString(x2 + CONFIRM_LABEL_WIDTH / 2, row1_text_y, get_translation('execution_date'))
    c.drawString(x3 + 8, row1_text_y, format_month_day(report.report_date))

    if signature_image:
        sig_w, sig_h = SIGNATURE_BOX
        embed_image(
            c, signature_image,
            x1 + (CONFIRM_SIGNATURE_WIDTH - sig_w) / 2,
            _y(top + (CONFIRM_ROW1_HEIGHT + sig_h) / 2),
            sig_w, sig_h, label='signature',
        )

    c.drawCentredString(x0 + CONFIRM_LABEL_WIDTH / 2, row2_text_y, get_translation('report'))
    c.drawString(x1 + 8, row2_text_y, _fit_text(report.created_by_name, 10, x_end - x1 - 16))


def _draw_site_lines(c, client_name, site_name):
    c.setFont(FONT, 11)
    if client_name:
        c.drawString(MARGIN, _y(CLIENT_BASELINE), _fit_text(
            f"{get_translation('client')}: {client_name}", 11, CONTENT_WIDTH))
    c.drawString(MARGIN, _y(SITE_BASELINE), _fit_text(
        f"{get_translation('site')}: {site_name or ''}", 11, CONTENT_WIDTH))


def _draw_checkbox(c, center_x, center_y, checked):
    half = CHECKBOX_SIZE / 2
    c.rect(center_x - half, center_y - half, CHECKBOX_SIZE, CHECKBOX_SIZE, stroke=1, fill=0)
    if checked:
        c.setFont(CHECK_FONT, 9)
        c.drawCentredString(center_x, center_y - 3, CHECK_GLYPH)


def _draw_worker_table(c, workers, lunch_policy):
    widths = _column_widths()
    xs = [MARGIN]
    for w in widths:
        xs.append(xs[-1] + w)
    table_bottom = TABLE_TOP + TABLE_HEADER_HEIGHT + TABLE_ROW_HEIGHT * TABLE_ROWS

    c.setLineWidth(0.8)
    c.rect(MARGIN, _y(table_bottom), CONTENT_WIDTH, table_bottom - TABLE_TOP)
    for x in xs[1:-1]:
        c.line(x, _y(TABLE_TOP), x, _y(table_bottom))
    c.line(MARGIN, _y(TABLE_TOP + TABLE_HEADER_HEIGHT), xs[-1], _y(TABLE_TOP + TABLE_HEADER_HEIGHT))
    c.setLineWidth(0.4)
    for i in range(1, TABLE_ROWS):
        row_top = TABLE_TOP + TABLE_HEADER_HEIGHT + TABLE_ROW_HEIGHT * i
        c.line(MARGIN, _y(row_top), xs[-1], _y(row_top))

    c.setFont(FONT, 9)
    header_y = _y(TABLE_TOP + TABLE_HEADER_HEIGHT / 2 + 3)
    for (key, _), x, w in zip(TABLE_COLUMNS, xs, widths):
        c.drawCentredString(x + w / 2, header_y, get_translation(key))

    # Rows past the fixed count are not printed
    rows = list(workers or [])[:TABLE_ROWS]
    for i in range(TABLE_ROWS):
        worker = rows[i] if i < len(rows) else None
        row_top = TABLE_TOP + TABLE_HEADER_HEIGHT + TABLE_ROW_HEIGHT * i
        text_y = _y(row_top + TABLE_ROW_HEIGHT / 2 + 3)
        center_y = _y(row_top + TABLE_ROW_HEIGHT / 2)
        checked = bool(worker and worker.get('no_lunch_break'))

        if worker:
            worked = compute_worked_duration(
                worker.get('start_time'), worker.get('end_time'),
                checked, lunch_policy,
            )
            c.setFont(FONT, 10)
            c.drawString(xs[0] + 4, text_y, _fit_text(worker.get('name'), 10, widths[0] - 8))
            c.drawCentredString(xs[1] + widths[1] / 2, text_y, worker.get('start_time') or '')
            c.drawCentredString(xs[2] + widths[2] / 2, text_y, worker.get('end_time') or '')
            c.drawCentredString(xs[3] + widths[3] / 2, text_y, worked)
            c.setFont(FONT, 9)
            c.drawString(xs[5] + 4, text_y, _fit_text(worker.get('remarks'), 9, widths[5] - 8))

        _draw_checkbox(c, xs[4] + widths[4] / 2, center_y, checked)


def _draw_notes(c, notes):
    c.setFont(FONT, 10)
    c.drawString(MARGIN, _y(NOTES_LABEL_BASELINE), get_translation('notes'))
    c.setLineWidth(0.8)
    c.rect(MARGIN, _y(NOTES_TOP + NOTES_HEIGHT), CONTENT_WIDTH, NOTES_HEIGHT)

    max_lines = int((NOTES_HEIGHT - 2 * NOTES_PADDING) // NOTES_LEADING)
    lines = _wrap_text(notes, NOTES_FONT_SIZE, CONTENT_WIDTH - 2 * NOTES_PADDING)
    c.setFont(FONT, NOTES_FONT_SIZE)
    for i, line in enumerate(lines[:max_lines]):
        c.drawString(
            MARGIN + NOTES_PADDING,
            _y(NOTES_TOP + NOTES_PADDING + NOTES_LEADING * (i + 1) - 3),
            line,
        )


def render_report_pdf(report, company, signature_image=None, logo_image=None,
                      client_name=None, lunch_policy=None, tz_name='Asia/Tokyo'):
    """
    Render one daily report into a single-page PDF

    Args:
        report: DailyReport (or any object with the same attributes)
        company: Company providing the header name
        signature_image: client signature bytes (optional)
        logo_image: company logo bytes (optional)
        client_name: prime contractor printed above the site line (optional)
        lunch_policy: LunchBreakPolicy for the worked-time column
        tz_name: timezone used to print the submission date

    Returns:
        bytes: PDF document
    """
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4, invariant=1)
    c.setTitle('作業日報')
    c.setAuthor(getattr(company, 'display_name', '') if company is not None else '')

    _draw_header(c, company, logo_image, report.submitted_at, tz_name)
    _draw_confirmation(c, report, signature_image)
    _draw_site_lines(c, client_name, report.site_name)
    _draw_worker_table(c, report.workers, lunch_policy or DEFAULT_LUNCH_POLICY)
    _draw_notes(c, report.notes)

    c.showPage()
    c.save()
    return buffer.getvalue()
