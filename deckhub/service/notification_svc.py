from typing import Optional

from deckhub.notify.notifier_interface import INotificationSender
from deckhub.core.logx import logger


def _format_reason(reason: str, details: Optional[str], key: str, value: str, actor: str) -> str:
    detail_part = f"\ndetails: {details}" if details else ""
    return f"{key}: {value}\nreported by: {actor}\nreason: {reason}{detail_part}"


def _safe_send(notifier: INotificationSender, title: str, body: str) -> bool:
    """
    发送通知，失败只记日志：通知是旁路，不能影响主流程
    """
    try:
        notifier.send(title, body)
        return True
    except Exception:
        logger.exception(f"notification failed: {title}")
        return False


def notify_deck_reported(
    notifier: INotificationSender,
    deck_id: str,
    reported_by: str,
    reason: str,
    details: Optional[str] = None,
) -> bool:
    return _safe_send(
        notifier,
        "Deck reported",
        _format_reason(reason, details, key="deck id", value=deck_id, actor=reported_by),
    )


def notify_comment_reported(
    notifier: INotificationSender,
    deck_id: str,
    comment_id: str,
    reported_by: str,
    reason: str,
    details: Optional[str] = None,
) -> bool:
    return _safe_send(
        notifier,
        "Comment reported",
        _format_reason(
            reason,
            details,
            key="comment id",
            value=f"{comment_id} (deck id: {deck_id})",
            actor=reported_by,
        ),
    )


def notify_deck_auto_hidden(notifier: INotificationSender, deck_id: str, distinct_reports: int) -> bool:
    return _safe_send(
        notifier,
        "Deck hidden automatically",
        f"deck id: {deck_id}\ndistinct reporters: {distinct_reports}",
    )


def notify_comment_auto_hidden(
    notifier: INotificationSender, deck_id: str, comment_id: str, distinct_reports: int
) -> bool:
    return _safe_send(
        notifier,
        "Comment hidden automatically",
        f"comment id: {comment_id}\ndeck id: {deck_id}\ndistinct reporters: {distinct_reports}",
    )
