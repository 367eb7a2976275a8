import html
import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Iterable, List, Optional

from fastapi import BackgroundTasks

from portal.core.config import settings

logger = logging.getLogger(__name__)

SUBMITTED_MESSAGE = "Your request has been submitted to procurement team for approval.."


@dataclass
class MailMessage:
    to: List[str]
    subject: str
    html: str
    text: str
    cc: List[str] = field(default_factory=list)
    from_name: str = "Bulk Buy"


class EmailService:
    """SMTP delivery; only logs the message when no SMTP host is configured."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user or "no-reply@localhost"

    @classmethod
    def from_settings(cls) -> "EmailService":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            sender=settings.MAIL_FROM,
        )

    def send(self, message: MailMessage) -> None:
        if not self.host:
            logger.info("Mail (not sent, SMTP disabled) to=%s subject=%s", message.to, message.subject)
            return

        email = EmailMessage()
        email["From"] = f"{message.from_name} <{self.sender}>"
        email["To"] = ", ".join(message.to)
        if message.cc:
            email["Cc"] = ", ".join(message.cc)
        email["Subject"] = message.subject
        email.set_content(message.text)
        email.add_alternative(message.html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
            smtp.starttls()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(email)


def deliver(service: EmailService, message: MailMessage) -> None:
    """Background task body. Failures are logged, never raised."""
    try:
        service.send(message)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send mail '%s' to %s", message.subject, message.to)


# ---------- CONTENT ----------


def _items_table(items: Iterable[dict]) -> str:
    rows = "".join(
        "<tr>"
        f"<td>{html.escape(str(item.get('name', '')))}</td>"
        f"<td>{html.escape(str(item.get('sku', '')))}</td>"
        f"<td>{html.escape(str(item.get('selected_color') or '-'))}</td>"
        f"<td>{html.escape(str(item.get('selected_size') or '-'))}</td>"
        f"<td>{item.get('quantity')}</td>"
        f"<td>&#8377;{item.get('unit_price')}</td>"
        f"<td>&#8377;{item.get('line_total')}</td>"
        "</tr>"
        for item in items
    )
    return (
        '<table border="1" cellpadding="6" cellspacing="0" style="border-collapse:collapse;">'
        "<tr><th>Product</th><th>SKU</th><th>Color</th><th>Size</th>"
        "<th>Qty</th><th>Unit Price</th><th>Line Total</th></tr>"
        f"{rows}</table>"
    )


def _team_recipients(procurement_emails: List[str]) -> List[str]:
    return procurement_emails or [settings.SUPPORT_EMAIL]


def build_submitted_messages(request, requester, procurement_emails: List[str]) -> List[MailMessage]:
    subject = f"Bulk Buy Request Submitted: {request.request_id}"
    total = f"{float(request.total_amount):.2f}"

    delivery = html.escape(request.delivery_method or "")
    if request.delivery_method == "delivery" and request.delivery_address:
        delivery += f" - {html.escape(request.delivery_address)}"
    note = f"<p><b>Note:</b> {html.escape(request.requester_note)}</p>" if request.requester_note else ""

    body = (
        '<div style="font-family:Arial,sans-serif;color:#111;">'
        "<h2>Bulk Buy Request Submitted</h2>"
        f"<p><b>Request ID:</b> {request.request_id}</p>"
        f"<p><b>Requester:</b> {html.escape(requester.full_name)} ({html.escape(requester.email)})</p>"
        f"<p><b>Status:</b> {request.status}</p>"
        f"<p><b>Delivery:</b> {delivery}</p>"
        f"{note}"
        "<h3>Items</h3>"
        f"{_items_table(request.items or [])}"
        f'<p style="margin-top:12px;"><b>Total:</b> &#8377;{total}</p>'
        f'<p style="margin-top:16px;">Message to user: <b>{SUBMITTED_MESSAGE}</b></p>'
        "</div>"
    )

    return [
        MailMessage(
            to=[requester.email],
            subject=subject,
            html=body,
            text=f"Bulk Buy Request {request.request_id} submitted. Total ₹{total}.",
        ),
        MailMessage(
            to=_team_recipients(procurement_emails),
            cc=[settings.SUPPORT_EMAIL],
            subject=subject,
            html=body,
            text=f"Bulk Buy Request {request.request_id} submitted by {requester.email}.",
        ),
    ]


def build_status_messages(request, requester, procurement_emails: List[str]) -> List[MailMessage]:
    subject = f"Bulk Buy Request {str(request.status).upper()}: {request.request_id}"
    note = (
        f"<p><b>Procurement Note:</b> {html.escape(request.procurement_note)}</p>"
        if request.procurement_note
        else ""
    )
    body = (
        '<div style="font-family:Arial,sans-serif;color:#111;">'
        "<h2>Bulk Buy Request Update</h2>"
        f"<p><b>Request ID:</b> {request.request_id}</p>"
        f"<p><b>Status:</b> {request.status}</p>"
        f"<p><b>Total:</b> &#8377;{float(request.total_amount):.2f}</p>"
        f"{note}"
        "</div>"
    )

    messages = []
    if requester is not None and requester.email:
        messages.append(
            MailMessage(
                to=[requester.email],
                subject=subject,
                html=body,
                text=f"Your Bulk Buy Request {request.request_id} is now {request.status}.",
            )
        )
    messages.append(
        MailMessage(
            to=_team_recipients(procurement_emails),
            cc=[settings.SUPPORT_EMAIL],
            subject=subject,
            html=body,
            text=f"Bulk Buy Request {request.request_id} updated to {request.status}.",
        )
    )
    return messages


def queue(background_tasks: Optional[BackgroundTasks], messages: List[MailMessage], service: Optional[EmailService] = None) -> None:
    """Hand messages to the background queue; they go out after the response."""
    service = service or EmailService.from_settings()
    for message in messages:
        if background_tasks is not None:
            background_tasks.add_task(deliver, service, message)
        else:
            deliver(service, message)
