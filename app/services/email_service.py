"""
Email Service for report approval notifications
"""
import smtplib
import logging
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from flask import current_app
from markupsafe import escape

from app.utils.i18n import format_full_date, format_month_day

logger = logging.getLogger(__name__)


def build_approval_email(report, company, auto_approved, pdf_url=None):
    """
    Compose the approval notice for one report

    Args:
        report: DailyReport that was approved
        company: owning Company
        auto_approved: True when the approval came from the site/company policy
        pdf_url: download link of the generated PDF (optional)

    Returns:
        tuple: (subject, body_text, body_html)
    """
    site_name = report.site_name or '-'
    date_label = format_month_day(report.report_date)
    subject = f"【日報承認】{site_name} {date_label}"

    if auto_approved:
        lead = "以下の日報が自動承認されました。"
    else:
        lead = "以下の日報が承認されました。"

    approved_by = (report.approval or {}).get('approved_by_name') or ''
    worker_count = len(report.workers or [])
    company_name = company.display_name if company else ''

    text = f"""
{company_name} ご担当者様

{lead}
PDFを添付しておりますのでご確認ください。

■ 現場名: {site_name}
■ 実施日: {format_full_date(report.report_date)}
■ 作成者: {report.created_by_name or ''}
■ 作業員数: {worker_count}名
{f'■ 承認者: {approved_by}' if approved_by and not auto_approved else ''}
{f'■ PDF: {pdf_url}' if pdf_url else ''}

※ このメールは労務管理システムから自動送信されています。
    """.strip()

    html_site = escape(site_name)
    html_author = escape(report.created_by_name or '')
    html_link = f'<p><a href="{escape(pdf_url)}">PDFを開く</a></p>' if pdf_url else ''

    html = f"""
<!DOCTYPE html>
<html>
<head>
    <style>
        body {{ font-family: sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: #2563eb; color: white; padding: 16px; border-radius: 5px 5px 0 0; }}
        .content {{ background: #f9f9f9; padding: 24px; border: 1px solid #ddd; }}
        .details td {{ padding: 4px 8px; }}
        .details td:first-child {{ font-weight: bold; width: 100px; }}
        .footer {{ text-align: center; padding: 16px; color: #666; font-size: 12px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header"><h2>日報承認のお知らせ</h2></div>
        <div class="content">
            <p>{lead}</p>
            <table class="details">
                <tr><td>現場名</td><td>{html_site}</td></tr>
                <tr><td>実施日</td><td>{format_full_date(report.report_date)}</td></tr>
                <tr><td>作成者</td><td>{html_author}</td></tr>
                <tr><td>作業員数</td><td>{worker_count}名</td></tr>
            </table>
            {html_link}
        </div>
        <div class="footer"><p>労務管理システム</p></div>
    </div>
</body>
</html>
    """

    return subject, text, html


def send_email(to_emails, subject, body_text, body_html=None, attachments=None):
    """
    Generic email sending function

    Args:
        to_emails: Recipient address or list of addresses
        subject: Email subject
        body_text: Plain text body
        body_html: HTML body (optional)
        attachments: list of {'filename', 'content', 'mimetype'} (optional)

    Returns:
        bool: True if sent successfully
    """
    recipients = [to_emails] if isinstance(to_emails, str) else list(to_emails or [])
    if not recipients:
        return False

    try:
        mail_server = current_app.config.get('MAIL_SERVER')
        mail_port = current_app.config.get('MAIL_PORT')
        mail_use_tls = current_app.config.get('MAIL_USE_TLS')
        mail_username = current_app.config.get('MAIL_USERNAME')
        mail_password = current_app.config.get('MAIL_PASSWORD')
        mail_sender = current_app.config.get('MAIL_DEFAULT_SENDER')
        sender_name = current_app.config.get('MAIL_SENDER_NAME')

        if not mail_username or not mail_password:
            logger.warning("Email not configured")
            return False

        msg = MIMEMultipart('mixed')
        msg['Subject'] = subject
        msg['From'] = formataddr((sender_name, mail_sender)) if sender_name else mail_sender
        msg['To'] = ', '.join(recipients)

        body = MIMEMultipart('alternative')
        body.attach(MIMEText(body_text, 'plain', 'utf-8'))
        if body_html:
            body.attach(MIMEText(body_html, 'html', 'utf-8'))
        msg.attach(body)

        for attachment in attachments or []:
            _, _, subtype = attachment.get('mimetype', 'application/octet-stream').partition('/')
            part = MIMEApplication(attachment['content'], _subtype=subtype or 'octet-stream')
            part.add_header('Content-Disposition', 'attachment', filename=attachment['filename'])
            msg.attach(part)

        with smtplib.SMTP(mail_server, mail_port) as server:
            if mail_use_tls:
                server.starttls()
            server.login(mail_username, mail_password)
            server.sendmail(mail_sender, recipients, msg.as_string())

        logger.info(f"Email sent to {', '.join(recipients)}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {', '.join(recipients)}: {e}")
        return False
