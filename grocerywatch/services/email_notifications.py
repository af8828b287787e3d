"""Email notification service for sending expiration digests."""

import logging
import typing as t
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape

from grocerywatch.core.config import SETTINGS
from grocerywatch.schemas.grocery_item import GroceryItemRecord

LOGGER = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
EMAIL_ENV = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: str | None = None,
) -> bool:
    """Send an email to a single recipient.

    Args:
        to_email (str): Recipient email address.
        subject (str): Email subject.
        body (str): Plain text email body.
        html_body (str | None): Optional HTML email body.

    Returns:
        bool: True if email was sent successfully, False otherwise.
    """
    if not SETTINGS.smtp_enabled:
        LOGGER.debug("SMTP not enabled, skipping email")
        return False

    if not to_email:
        LOGGER.warning("No recipient email provided")
        return False

    try:
        message: MIMEMultipart = MIMEMultipart("alternative")
        message["From"] = SETTINGS.smtp_from_email
        message["To"] = to_email
        message["Subject"] = subject

        message.attach(MIMEText(body, "plain"))

        if html_body is not None:
            message.attach(MIMEText(html_body, "html"))

        await aiosmtplib.send(
            message,
            hostname=SETTINGS.smtp_host,
            port=SETTINGS.smtp_port,
            username=SETTINGS.smtp_user if SETTINGS.smtp_user else None,
            password=SETTINGS.smtp_password if SETTINGS.smtp_password else None,
            use_tls=SETTINGS.smtp_port == 465,
            start_tls=SETTINGS.smtp_port == 587,
            timeout=10,
        )
        LOGGER.info("Email sent to %s", to_email)
        return True

    except Exception:  # pylint: disable=broad-except
        LOGGER.exception("Failed to send email to %s", to_email)
        return False


def render_template(template_name: str, **context: t.Any) -> str:
    """Render a Jinja2 email template with the given context.

    Args:
        template_name (str): The name of the template file.
        **context: Context variables for rendering the template.

    Returns:
        str: The rendered template as a string.
    """
    return EMAIL_ENV.get_template(template_name).render(**context)


def _digest_context(
    expired: t.Sequence[GroceryItemRecord],
    expiring: t.Sequence[GroceryItemRecord],
) -> t.Dict[str, t.Any]:
    return {
        "app_name": SETTINGS.app_name,
        "expired": expired,
        "expiring": expiring,
        "window_days": SETTINGS.expiring_window_days,
        "app_url": SETTINGS.app_url,
    }


def format_expiration_html_email(
    expired: t.Sequence[GroceryItemRecord],
    expiring: t.Sequence[GroceryItemRecord],
) -> str:
    """Format an expiration digest as HTML.

    Args:
        expired (Sequence[GroceryItemRecord]): Items already expired.
        expiring (Sequence[GroceryItemRecord]): Items expiring soon.

    Returns:
        str: The rendered HTML email as a string.
    """
    return render_template(
        "emails/expiration_alert.html", **_digest_context(expired, expiring)
    )


def format_expiration_text_email(
    expired: t.Sequence[GroceryItemRecord],
    expiring: t.Sequence[GroceryItemRecord],
) -> str:
    """Format an expiration digest as plain text.

    Args:
        expired (Sequence[GroceryItemRecord]): Items already expired.
        expiring (Sequence[GroceryItemRecord]): Items expiring soon.

    Returns:
        str: The rendered plain text email as a string.
    """
    return render_template(
        "emails/expiration_alert.txt", **_digest_context(expired, expiring)
    )


async def send_expiration_digest(
    expired: t.Sequence[GroceryItemRecord],
    expiring: t.Sequence[GroceryItemRecord],
    to_email: str | None = None,
) -> bool:
    """Send the expiration digest to the configured recipient.

    Args:
        expired (Sequence[GroceryItemRecord]):
            Items already expired.
        expiring (Sequence[GroceryItemRecord]):
            Items expiring within the sweep window.
        to_email (str | None):
            Recipient override, defaults to the configured digest recipient.

    Returns:
        bool: True if the email was sent, False otherwise.
    """
    if not expired and not expiring:
        return False

    subject: str = f"🚨 [{SETTINGS.app_name}] Items expiring soon!"
    if expired:
        subject = f"⚠️ [{SETTINGS.app_name}] Items have expired!"

    return await send_email(
        to_email=to_email or SETTINGS.digest_recipient_email,
        subject=subject,
        body=format_expiration_text_email(expired, expiring),
        html_body=format_expiration_html_email(expired, expiring),
    )
