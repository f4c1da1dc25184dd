import asyncio
import logging
import smtplib
from concurrent.futures import ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from jobboard import config
from jobboard.errors import EmailDeliveryError

logger = logging.getLogger(__name__)

# smtplib blocks, so sends run off the event loop
executor = ThreadPoolExecutor(max_workers=3)

SMTP_CONFIGS = {
    "gmail": {"host": "smtp.gmail.com", "port": 587, "use_tls": True},
    "outlook": {"host": "smtp-mail.outlook.com", "port": 587, "use_tls": True},
    "yahoo": {"host": "smtp.mail.yahoo.com", "port": 587, "use_tls": True},
    "office365": {"host": "smtp.office365.com", "port": 587, "use_tls": True},
}


def detect_email_provider(email_address: str) -> str:
    domain = email_address.lower().rsplit("@", 1)[-1]
    if domain == "gmail.com":
        return "gmail"
    if domain in ("outlook.com", "hotmail.com"):
        return "outlook"
    if domain == "yahoo.com":
        return "yahoo"
    return "custom"


def get_smtp_config() -> dict:
    provider = config.MAIL_PROVIDER
    if provider == "auto":
        provider = detect_email_provider(config.MAIL_USERNAME)
    return SMTP_CONFIGS.get(
        provider, {"host": config.SMTP_HOST, "port": config.SMTP_PORT, "use_tls": True}
    )


def send_email_sync(to_email: str, subject: str, html_content: str, text_content: str = None) -> bool:
    """
    Send one message over SMTP.

    Returns False without sending when no mail credentials are configured
    (local development); the text body is then logged at DEBUG level.
    Raises EmailDeliveryError if the SMTP server refuses the message.
    """
    if not config.MAIL_USERNAME or not config.MAIL_PASSWORD:
        logger.warning("Mail credentials not configured; '%s' to %s was not sent", subject, to_email)
        logger.debug("Unsent message body:\n%s", text_content or html_content)
        return False

    smtp_config = get_smtp_config()

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = f"{config.MAIL_FROM_NAME} <{config.MAIL_USERNAME}>"
    message["To"] = to_email
    if text_content:
        message.attach(MIMEText(text_content, "plain"))
    message.attach(MIMEText(html_content, "html"))

    try:
        with smtplib.SMTP(smtp_config["host"], smtp_config["port"], timeout=30) as server:
            server.ehlo()
            if smtp_config["use_tls"]:
                server.starttls()
                server.ehlo()
            server.login(config.MAIL_USERNAME, config.MAIL_PASSWORD)
            server.send_message(message)
    except (smtplib.SMTPException, OSError):
        logger.exception("Sending '%s' to %s via %s failed", subject, to_email, smtp_config["host"])
        raise EmailDeliveryError()

    logger.info("Sent '%s' to %s", subject, to_email)
    return True


async def send_otp_email(email: str, otp: str, name: str = "User") -> bool:
    """Mail a password reset code to the account holder."""
    subject = "Your password reset code"
    minutes = config.OTP_EXPIRE_MINUTES

    text_content = (
        f"Hello {name},\n\n"
        f"Your code to reset your password is: {otp}\n\n"
        f"It is valid for {minutes} minutes. If you did not ask for it, ignore this email.\n"
    )
    html_content = f"""
<html>
<body style="font-family:Arial,sans-serif;color:#2d3748;">
    <p>Hello <strong>{name}</strong>,</p>
    <p>Use this code to reset your password:</p>
    <p style="font-size:32px;font-weight:bold;letter-spacing:8px;font-family:'Courier New',monospace;">{otp}</p>
    <p>The code is valid for <strong>{minutes} minutes</strong>.</p>
    <p style="color:#718096;font-size:13px;">If you didn't request this, please ignore this email.</p>
</body>
</html>
"""

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, send_email_sync, email, subject, html_content, text_content)
