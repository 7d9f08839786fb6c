import httpx
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from app.core.config import settings
from app.core.metrics import email_deliveries

logger = logging.getLogger(__name__)


@dataclass
class Attachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class OutgoingMail:
    to: List[str]
    subject: str
    html: str
    sender: str = field(default_factory=lambda: settings.MAIL_FROM)
    attachments: List[Attachment] = field(default_factory=list)


async def send_mail(
    mail: OutgoingMail,
    retries: int | None = None,
    backoff: float = 1.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bool:
    """Deliver a message through the Mailgun messages API, retrying with exponential back-off."""
    if retries is None:
        retries = settings.MAIL_RETRIES

    if not mail.to:
        logger.warning(f"Mail '{mail.subject}' has no recipients, nothing sent")
        return False

    data = {
        "from": mail.sender,
        "to": mail.to,
        "subject": mail.subject,
        "html": mail.html,
    }
    files = [
        ("attachment", (a.filename, a.content, a.content_type))
        for a in mail.attachments
    ]

    for attempt in range(1, retries + 1):
        try:
            async with httpx.AsyncClient(timeout=settings.MAIL_TIMEOUT, transport=transport) as client:
                response = await client.post(
                    settings.mailgun_messages_url,
                    auth=("api", settings.MAILGUN_API_KEY),
                    data=data,
                    files=files or None,
                )

                if 200 <= response.status_code < 300:
                    email_deliveries.labels(status="success", attempt=str(attempt)).inc()
                    logger.info(f"Mail '{mail.subject}' delivered to {len(mail.to)} recipient(s)")
                    return True
                else:
                    email_deliveries.labels(status="failed", attempt=str(attempt)).inc()
                    logger.warning(
                        f"Mail delivery failed (attempt {attempt}/{retries}): "
                        f"Status {response.status_code} for '{mail.subject}'"
                    )
        except httpx.TimeoutException:
            email_deliveries.labels(status="timeout", attempt=str(attempt)).inc()
            logger.warning(f"Mail timeout (attempt {attempt}/{retries}) for '{mail.subject}'")
        except httpx.HTTPError as e:
            email_deliveries.labels(status="error", attempt=str(attempt)).inc()
            logger.warning(f"Mail delivery error (attempt {attempt}/{retries}): {e} for '{mail.subject}'")

        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0

    logger.error(f"Mail delivery failed after {retries} attempts for '{mail.subject}'")
    return False
