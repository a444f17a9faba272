"""Outbound email: message type, SMTP delivery and the send queue.

Emails are queued as one-off jobs on the application's background
scheduler so a slow SMTP server never holds up a request or the batch
notifier. Outside the web app (the CLI scripts) there is no running
scheduler and messages are sent straight away.
"""
import logging
import smtplib
import ssl
from email.message import EmailMessage as MimeMessage
from email.utils import formataddr

from sqlmodel import Field, SQLModel

from studio_ops.core.config import settings

logger = logging.getLogger(__name__)


class EmailMessage(SQLModel):
    """An email ready to send.

    Attributes:
        subject: Subject line.
        body: HTML body.
        to: Primary recipients.
        cc: Carbon-copy recipients.
        reply_to: Optional ``{"name": ..., "email": ...}`` for the Reply-To header.
    """
    subject: str
    body: str
    to: list[str]
    cc: list[str] = Field(default_factory=list)
    reply_to: dict[str, str] = Field(default_factory=dict)


def build_mime_message(message: EmailMessage) -> MimeMessage:
    mime = MimeMessage()
    mime["Subject"] = message.subject
    mime["From"] = settings.email_from_address
    mime["To"] = ", ".join(message.to)
    if message.cc:
        mime["Cc"] = ", ".join(message.cc)
    if message.reply_to.get("email"):
        mime["Reply-To"] = formataddr((message.reply_to.get("name", ""), message.reply_to["email"]))
    mime.set_content("This message requires an HTML capable email client.")
    mime.add_alternative(message.body, subtype="html")
    return mime


def send_email(message: EmailMessage) -> None:
    """Deliver ``message`` over SMTP. Errors are logged and re-raised."""
    recipients = list(dict.fromkeys(message.to + message.cc))
    if not recipients:
        logger.warning(f"Email '{message.subject}' has no recipients, not sending")
        return

    mime = build_mime_message(message)
    try:
        if settings.smtp_port == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context, timeout=30)
        else:
            server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30)
            if settings.smtp_use_tls:
                server.starttls(context=ssl.create_default_context())
        with server:
            if settings.smtp_username:
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(mime, to_addrs=recipients)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email '{message.subject}': {e}")
        raise

    logger.info(f"Sent email '{message.subject}' to {len(recipients)} recipient(s)")


def dispatch_email(message: EmailMessage) -> None:
    """Queue ``message`` on the background scheduler, or send it now if none is running."""
    from studio_ops.core.scheduler import scheduler

    if scheduler.running:
        scheduler.add_job(send_email, args=[message], name=f"email: {message.subject}")
        logger.info(f"Queued email '{message.subject}'")
    else:
        send_email(message)
