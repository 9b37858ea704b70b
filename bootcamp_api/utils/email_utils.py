# bootcamp_api/utils/email_utils.py
import logging
import smtplib
from email.message import EmailMessage

from bootcamp_api.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


def reset_password_body(reset_url: str) -> str:
    return (
        "You are receiving this email because you (or someone else) has requested "
        f"the reset of a password. Please make a PUT request to:\n\n{reset_url}"
    )


def build_message(to_email: str, subject: str, body: str, settings: Settings) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f"{settings.FROM_NAME} <{settings.FROM_EMAIL}>"
    msg["To"] = to_email
    msg.set_content(body)
    return msg


def send_email(to_email: str, subject: str, body: str, settings: Settings = default_settings) -> None:
    """
    Blocking send over SMTP. Port 465 uses implicit TLS, anything else
    upgrades with STARTTLS when the server offers it.
    Callers in async code run this in a thread.
    """
    msg = build_message(to_email, subject, body, settings)

    if settings.SMTP_PORT == SMTPS_PORT:
        smtp = smtplib.SMTP_SSL(settings.SMTP_SERVER, settings.SMTP_PORT)
    else:
        smtp = smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT)

    with smtp:
        if settings.SMTP_PORT != SMTPS_PORT:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
        if settings.SMTP_USER:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        smtp.send_message(msg)

    logger.info("Sent %r to %s", subject, to_email)
