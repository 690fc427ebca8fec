from typing import Dict, Optional

from deckhub.models.report import ReportReason
from deckhub.schemas.report import ReportResultOut

from deckhub.storage.deck.deck_interface import IDeckRepository
from deckhub.storage.comment.comment_interface import ICommentRepository
from deckhub.storage.report.report_interface import IReportRepository
from deckhub.notify.notifier_interface import INotificationSender

from deckhub.service import notification_svc
from deckhub.service.moderation import should_hide

from deckhub.core.logx import logger
from deckhub.core.exceptions import DeckNotFound, CommentNotFound


# 通报流程分两步：
#   1) 写入通报并发送通报通知（通报一旦写入就不会因为后续步骤失败而丢失）
#   2) 按不同通报人数评估是否隐藏，隐藏成功时再发一条自动隐藏通知
# 第 2 步失败只记日志；阈值判断是 >=，下一次通报会重新评估，隐藏本身幂等

def _hide_deck(
    deck_repo: IDeckRepository, notifier: INotificationSender, deck_id: str, distinct_reporters: int
) -> bool:
    """隐藏卡组；只有本次真正发生 Active -> Hidden 时才通知"""
    transitioned = deck_repo.soft_delete_deck(deck_id)
    if transitioned:
        logger.info(f"Auto-hid deck id={deck_id}, distinct_reporters={distinct_reporters}")
        notification_svc.notify_deck_auto_hidden(notifier, deck_id, distinct_reporters)
    return transitioned


def _hide_deck_comments(comment_repo: ICommentRepository, deck_id: str) -> None:
    # 卡组已经隐藏时照样执行：上次评论级联失败的话，这里会补齐
    hidden_comments = comment_repo.soft_delete_by_deck(deck_id)
    if hidden_comments:
        logger.info(f"Hid {hidden_comments} comments of moderated deck id={deck_id}")


def report_deck(
    deck_repo: IDeckRepository,
    comment_repo: ICommentRepository,
    report_repo: IReportRepository,
    notifier: INotificationSender,
    deck_id: str,
    user_id: str,
    reason: ReportReason,
    details: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | ReportResultOut:
    """
    通报卡组：
    1. 卡组不存在 -> DeckNotFound（已隐藏的卡组仍接受通报）
    2. 写入通报，发送通报通知
    3. 不同通报人数达到阈值 -> 隐藏卡组与评论（幂等），卡组本次才被隐藏时发送自动隐藏通知
    """
    deck = deck_repo.admin_get_deck(deck_id)
    if not deck:
        raise DeckNotFound(deck_id=deck_id)

    report = report_repo.create_deck_report(deck_id, user_id, reason, details)
    logger.info(f"User {user_id} reported deck={deck_id}, reason={ReportReason(reason).value}, report_id={report.id}")
    notification_svc.notify_deck_reported(notifier, deck_id, user_id, ReportReason(reason).value, details)

    distinct_reporters = 0
    hidden = False
    try:
        distinct_reporters = report_repo.count_distinct_deck_reporters(deck_id)
        if should_hide(distinct_reporters):
            hidden = _hide_deck(deck_repo, notifier, deck_id, distinct_reporters)
            _hide_deck_comments(comment_repo, deck_id)
    except Exception:
        logger.exception(f"moderation escalation failed for deck={deck_id}, report {report.id} is kept")

    result = ReportResultOut(report_id=report.id, distinct_reporters=distinct_reporters, hidden=hidden)
    return result.model_dump() if to_dict else result


def report_comment(
    deck_repo: IDeckRepository,
    comment_repo: ICommentRepository,
    report_repo: IReportRepository,
    notifier: INotificationSender,
    deck_id: str,
    comment_id: str,
    user_id: str,
    reason: ReportReason,
    details: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | ReportResultOut:
    """
    通报评论：流程与通报卡组相同，只隐藏这一条评论
    """
    if not deck_repo.admin_get_deck(deck_id):
        raise DeckNotFound(deck_id=deck_id)
    comment = comment_repo.admin_get_comment(comment_id)
    if not comment or comment.deck_id != deck_id:
        raise CommentNotFound(comment_id=comment_id)

    report = report_repo.create_comment_report(deck_id, comment_id, user_id, reason, details)
    logger.info(f"User {user_id} reported comment={comment_id} on deck={deck_id}, report_id={report.id}")
    notification_svc.notify_comment_reported(
        notifier, deck_id, comment_id, user_id, ReportReason(reason).value, details
    )

    distinct_reporters = 0
    hidden = False
    try:
        distinct_reporters = report_repo.count_distinct_comment_reporters(comment_id)
        if should_hide(distinct_reporters):
            hidden = comment_repo.soft_delete_comment(comment_id)
            if hidden:
                logger.info(f"Auto-hid comment id={comment_id}, distinct_reporters={distinct_reporters}")
                notification_svc.notify_comment_auto_hidden(notifier, deck_id, comment_id, distinct_reporters)
    except Exception:
        logger.exception(f"moderation escalation failed for comment={comment_id}, report {report.id} is kept")

    result = ReportResultOut(report_id=report.id, distinct_reporters=distinct_reporters, hidden=hidden)
    return result.model_dump() if to_dict else result
