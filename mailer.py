import logging

import resend

from config import MAIL_FROM, RESEND_API_KEY
from errors import MailDeliveryError

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def send_mail(email: str, subject: str, message: str) -> None:
    """Send a plain-text transactional email, raising MailDeliveryError on any failure."""
    payload = {
        "from": MAIL_FROM,
        "to": [email],
        "subject": subject,
        "text": message,
    }
    try:
        resend.Emails.send(payload)
    except Exception as exc:
        logger.error("Mail '%s' to %s failed: %s", subject, email, exc)
        raise MailDeliveryError() from exc
    logger.info("Mail '%s' sent to %s", subject, email)
