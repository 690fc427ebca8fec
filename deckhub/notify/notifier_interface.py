# deckhub/notify/notifier_interface.py

from typing import Protocol


class INotificationSender(Protocol):
    """
    通知出口（fire-and-forget）：
    - 调用方不依赖发送结果，发送失败由 notification_svc 记录日志后吞掉
    """

    def send(self, title: str, body: str) -> None:
        ...
