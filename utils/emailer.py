import smtplib
from email.message import EmailMessage

from flask import current_app

from services.errors import MailRateLimitError

# SMTP replies providers use for "quota reached, try later"
_RATE_LIMIT_CODES = {421, 450, 451, 452, 454}
_RATE_LIMIT_WORDS = ("limit", "quota", "too many")


def is_rate_limit_reply(code: int, message) -> bool:
    if code not in _RATE_LIMIT_CODES:
        return False
    text = message.decode("utf-8", "ignore") if isinstance(message, bytes) else str(message or "")
    text = text.lower()
    return any(word in text for word in _RATE_LIMIT_WORDS)


def send_email(to_email: str, subject: str, body: str):
    """
    Returns (ok, error). Raises MailRateLimitError when the provider reports
    a sending quota, so schedulers can back off.
    """
    host = current_app.config.get("SMTP_HOST")
    port = current_app.config.get("SMTP_PORT", 587)
    username = current_app.config.get("SMTP_USERNAME")
    password = current_app.config.get("SMTP_PASSWORD")
    from_email = current_app.config.get("SMTP_FROM_EMAIL") or username
    use_tls = current_app.config.get("SMTP_USE_TLS", True)

    if not host or not from_email:
        return False, "Email not configured"

    msg = EmailMessage()
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(host, port, timeout=10) as server:
            if use_tls:
                server.starttls()
            if username and password:
                server.login(username, password)
            server.send_message(msg)
        return True, None
    except smtplib.SMTPResponseException as exc:
        if is_rate_limit_reply(exc.smtp_code, exc.smtp_error):
            raise MailRateLimitError(str(exc))
        return False, str(exc)
    except smtplib.SMTPRecipientsRefused as exc:
        for code, message in exc.recipients.values():
            if is_rate_limit_reply(code, message):
                raise MailRateLimitError(str(exc))
        return False, str(exc)
    except (smtplib.SMTPException, OSError) as exc:
        return False, str(exc)
