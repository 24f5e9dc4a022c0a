# services/push_service.py
"""
Expo のプッシュ通知送信（exponent_server_sdk）
不正なトークンや送信失敗はログに残すだけで、呼び出し元には投げない
"""
import logging
from typing import Optional

from exponent_server_sdk import (
    PushClient,
    PushMessage,
    PushServerError,
    PushTicketError,
)
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)


def is_expo_push_token(token: Optional[str]) -> bool:
    return bool(token) and PushClient.is_exponent_push_token(token)


class PushService:
    def __init__(self, client: PushClient):
        self.client = client

    def send(self, push_token: str, title: str, body: str, data: Optional[dict] = None) -> bool:
        """送れたら True"""
        if not is_expo_push_token(push_token):
            logger.error("Push token %s is not a valid Expo push token", push_token)
            return False

        message = PushMessage(
            to=push_token,
            sound="default",
            title=title,
            body=body,
            data=data,
        )

        try:
            ticket = self.client.publish(message)
            ticket.validate_response()
        except (PushServerError, PushTicketError, RequestException) as e:
            logger.error("Error sending push notification: %s", e)
            return False

        return True
