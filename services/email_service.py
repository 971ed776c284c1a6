"""
Email Service - sends business documents to clients over SMTP.

Every send attempt is stored as an EmailRecord, including failures.
"""

import html
import logging
import smtplib
from datetime import datetime
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, List, Optional, Tuple

from database.models import EmailRecord
from documents.formatting import format_money, format_date

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the SMTP server could not deliver a message."""

    def __init__(self, message: str, record: Dict[str, Any] = None):
        self.record = record
        super().__init__(message)


_STYLE = """
        body { font-family: 'Segoe UI', Arial, sans-serif; line-height: 1.6; color: #333; }
        .container { max-width: 600px; margin: 0 auto; background: #fff; }
        .header { background: #1d4ed8; color: white; padding: 24px; text-align: center; }
        .content { padding: 24px; }
        .summary { background: #f3f4f6; border-left: 4px solid #2563eb; padding: 16px; margin: 20px 0; }
        .total { background: #047857; color: white; padding: 16px; text-align: center; font-weight: 700; }
        .btn { display: inline-block; background: #2563eb; color: white; padding: 12px 24px;
               text-decoration: none; border-radius: 6px; }
        .footer { font-size: 12px; color: #6b7280; text-align: center; padding: 16px; }
"""


def _html_page(subject: str, company_name: str, greeting: str, body: str,
               summary_rows: List[Tuple[str, str]], total_line: str, link: str,
               link_label: str, client_company: str) -> str:
    rows = "\n".join(
        f"<div><strong>{html.escape(label)}:</strong> {html.escape(value)}</div>"
        for label, value in summary_rows
    )
    body_html = html.escape(body).replace('\n', '<br>')
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{html.escape(subject)}</title>
    <style>{_STYLE}</style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1 style="margin: 0;">{html.escape(company_name)}</h1>
            <p style="margin: 6px 0 0 0;">Professional Outdoor Advertising Solutions</p>
        </div>
        <div class="content">
            <p>Dear {html.escape(greeting)},</p>
            <p>{body_html}</p>
            <div class="summary">
{rows}
            </div>
            <div class="total">{html.escape(total_line)}</div>
            <p style="text-align: center; margin: 24px 0;">
                <a href="{html.escape(link)}" class="btn">{html.escape(link_label)}</a>
            </p>
            <p>Best regards,<br><strong>The {html.escape(company_name)} Team</strong></p>
        </div>
        <div class="footer">
            <p>This document is confidential and intended solely for {html.escape(client_company)}.</p>
            <p>&copy; {datetime.utcnow().year} {html.escape(company_name)}. All rights reserved.</p>
        </div>
    </div>
</body>
</html>
"""


def _text_page(greeting: str, body: str, summary_rows: List[Tuple[str, str]],
               total_line: str, link: str, company_name: str) -> str:
    lines = [f"Dear {greeting},", "", body, ""]
    lines.extend(f"{label}: {value}" for label, value in summary_rows)
    lines.extend(["", total_line, "", f"View online: {link}", "", "Best regards,",
                  f"The {company_name} Team"])
    return "\n".join(lines)


def render_cost_estimate_email(estimate: Dict[str, Any], subject: str, body: str,
                               app_url: str, company_name: str) -> Tuple[str, str]:
    """Return (html, text) bodies for a cost estimate email."""
    client = estimate.get('client') or {}
    greeting = client.get('contactPerson') or client.get('name') or client.get('company') or 'Valued Client'
    rows = [
        ('Estimate Title', estimate.get('title') or 'Custom Cost Estimate'),
        ('Estimate Number', estimate.get('cost_estimate_number') or ''),
        ('Number of Line Items', f"{len(estimate.get('line_items') or [])} cost components"),
        ('Created Date', format_date(estimate.get('created_at'))),
    ]
    total = f"Total Estimated Cost: PHP {format_money(estimate.get('total_amount'))}"
    link = f"{app_url}/cost-estimates/view/{estimate.get('id')}"
    client_company = client.get('company') or 'your company'
    return (
        _html_page(subject, company_name, greeting, body, rows, total, link,
                   'View Full Cost Estimate Online', client_company),
        _text_page(greeting, body, rows, total, link, company_name),
    )


def render_quotation_email(quotation: Dict[str, Any], subject: str, body: str,
                           app_url: str, company_name: str) -> Tuple[str, str]:
    greeting = quotation.get('client_name') or quotation.get('client_company_name') or 'Valued Client'
    items = quotation.get('items') or []
    rows = [
        ('Quotation Number', quotation.get('quotation_number') or ''),
        ('Site', items[0].get('name', '') if items else 'N/A'),
        ('Contract Period', f"{format_date(quotation.get('start_date'))} - "
                            f"{format_date(quotation.get('end_date'))}"),
        ('Valid Until', format_date(quotation.get('valid_until'))),
    ]
    total = f"Total Amount: PHP {format_money(quotation.get('total_amount'))}"
    link = f"{app_url}/quotations/{quotation.get('id')}/accept"
    client_company = quotation.get('client_company_name') or 'your company'
    return (
        _html_page(subject, company_name, greeting, body, rows, total, link,
                   'View Quotation Online', client_company),
        _text_page(greeting, body, rows, total, link, company_name),
    )


def render_proposal_email(proposal: Dict[str, Any], subject: str, body: str,
                          app_url: str, company_name: str) -> Tuple[str, str]:
    client = proposal.get('client') or {}
    greeting = client.get('contactPerson') or client.get('company') or 'Valued Client'
    rows = [
        ('Proposal', proposal.get('title') or ''),
        ('Proposal Number', proposal.get('proposal_number') or ''),
        ('Sites Included', str(len(proposal.get('products') or []))),
        ('Valid Until', format_date(proposal.get('valid_until'))),
        ('Access Code', proposal.get('password') or ''),
    ]
    total = f"Total Investment: PHP {format_money(proposal.get('total_amount'))}"
    link = f"{app_url}/proposals/view/{proposal.get('id')}"
    client_company = client.get('company') or 'your company'
    return (
        _html_page(subject, company_name, greeting, body, rows, total, link,
                   'View Proposal Online', client_company),
        _text_page(greeting, body, rows, total, link, company_name),
    )


class EmailService:
    """SMTP sender that records every attempt."""

    def __init__(self, session, company_id: str, user_id: str = None,
                 smtp_host: str = '', smtp_port: int = 587, smtp_user: str = '',
                 smtp_password: str = '', use_tls: bool = True,
                 from_email: str = 'noreply@ohplus.ph'):
        self.session = session
        self.company_id = company_id
        self.user_id = user_id
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.use_tls = use_tls
        self.from_email = from_email
        self.email_enabled = bool(self.smtp_host)

    @classmethod
    def from_config(cls, session, company_id: str, user_id: str, config) -> 'EmailService':
        return cls(
            session, company_id, user_id,
            smtp_host=config.get('SMTP_HOST', ''),
            smtp_port=config.get('SMTP_PORT', 587),
            smtp_user=config.get('SMTP_USER', ''),
            smtp_password=config.get('SMTP_PASSWORD', ''),
            use_tls=config.get('SMTP_USE_TLS', True),
            from_email=config.get('FROM_EMAIL', 'noreply@ohplus.ph')
        )

    def build_message(self, to_email: str, subject: str, text: str, html_body: str,
                      cc: List[str] = None, reply_to: str = None,
                      attachments: List[Tuple[str, str]] = None) -> MIMEMultipart:
        """Attachments are (filename, base64 text) pairs, as from render_pdf_base64."""
        msg = MIMEMultipart('mixed')
        msg['Subject'] = subject
        msg['From'] = self.from_email
        msg['To'] = to_email
        if cc:
            msg['Cc'] = ', '.join(cc)
        if reply_to:
            msg['Reply-To'] = reply_to

        alternative = MIMEMultipart('alternative')
        alternative.attach(MIMEText(text, 'plain'))
        alternative.attach(MIMEText(html_body, 'html'))
        msg.attach(alternative)

        for filename, content in attachments or []:
            part = MIMEBase('application', 'pdf')
            part.set_payload(content)
            part['Content-Transfer-Encoding'] = 'base64'
            part.add_header('Content-Disposition', 'attachment', filename=filename)
            msg.attach(part)
        return msg

    def send(self, to_email: str, subject: str, text: str, html_body: str,
             cc: List[str] = None, reply_to: str = None,
             attachments: List[Tuple[str, str]] = None,
             entity_type: str = None, entity_id: str = None) -> Dict[str, Any]:
        """
        Send one message and record it.

        Raises:
            EmailDeliveryError: when email is not configured or SMTP fails.
                The failed EmailRecord is still stored.
        """
        cc = cc or []
        record = EmailRecord(
            company_id=self.company_id,
            entity_type=entity_type,
            entity_id=entity_id,
            to_email=to_email,
            cc=cc,
            reply_to=reply_to,
            subject=subject,
            body=text,
            attachments=[name for name, _ in attachments or []],
            sent_by=self.user_id
        )
        self.session.add(record)

        error = self._deliver(to_email, subject, text, html_body, cc, reply_to, attachments)
        record.status = 'failed' if error else 'sent'
        record.error = error
        self.session.flush()

        if error:
            raise EmailDeliveryError(error, record.to_dict())

        logger.info(f"Sent {entity_type or 'email'} {entity_id or ''} to {to_email}")
        return record.to_dict()

    def _deliver(self, to_email, subject, text, html_body, cc, reply_to,
                 attachments) -> Optional[str]:
        """Returns None on success, otherwise the error message."""
        if not self.email_enabled:
            logger.warning(f"Email not configured; message to {to_email} not sent")
            return "Email service is not configured"

        msg = self.build_message(to_email, subject, text, html_body, cc, reply_to, attachments)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                if self.use_tls:
                    server.starttls()
                if self.smtp_user:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg, to_addrs=[to_email] + list(cc))
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email to {to_email}: {e}")
            return str(e)
        return None
