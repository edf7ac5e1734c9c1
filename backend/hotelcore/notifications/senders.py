"""
Outbound message senders
"""
import json
import logging
import uuid

from twilio.rest import Client

from hotelcore.core.config import settings

logger = logging.getLogger(__name__)


class LoggingSender:
    """Used when no messaging provider is configured"""

    def send(self, notification) -> str:
        delivery_id = f"log-{uuid.uuid4().hex[:12]}"
        logger.info(
            "notification %s via %s to %s: %s",
            delivery_id,
            notification.channel,
            notification.recipient,
            notification.description or notification.template_id or notification.body,
        )
        return delivery_id


class TwilioSender:
    """WhatsApp messages through Twilio, by content template or freeform body"""

    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        self.client = Client(account_sid, auth_token)
        self.from_number = from_number

    def send(self, notification) -> str:
        params = {
            "from_": f"whatsapp:{self.from_number}",
            "to": f"whatsapp:{notification.recipient}",
        }
        if notification.template_id:
            params["content_sid"] = notification.template_id
            params["content_variables"] = json.dumps(
                {str(i + 1): value for i, value in enumerate(notification.variables or [])}
            )
        else:
            params["body"] = notification.body
        message = self.client.messages.create(**params)
        return message.sid


def build_sender():
    if settings.twilio_configured:
        return TwilioSender(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_WHATSAPP_FROM)
    logger.warning("Twilio credentials not configured, notifications will only be logged")
    return LoggingSender()
