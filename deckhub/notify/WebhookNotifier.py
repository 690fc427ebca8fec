# deckhub/notify/WebhookNotifier.py

from typing import Optional

import requests

from deckhub.notify.notifier_interface import INotificationSender
from deckhub.core.logx import logger


class WebhookNotifier(INotificationSender):
    """
    通过 Webhook（Discord 兼容格式）发送通知：
        POST {"content": "**title**\\nbody"}
    未配置 webhook_url 时什么都不做
    """

    def __init__(self, webhook_url: Optional[str], timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.webhook_url = webhook_url or ""
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, title: str, body: str) -> None:
        if not self.webhook_url:
            logger.debug(f"webhook url not configured, skip notification: {title}")
            return

        resp = self.session.post(
            self.webhook_url,
            json={"content": f"**{title}**\n{body}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()

    def close(self) -> None:
        self.session.close()
