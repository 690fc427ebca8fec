from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from deckhub.schemas.report import ReportCreate, ReportResultOut

from deckhub.core.biz_response import BizResponse
from deckhub.core.logx import logger
from deckhub.core.exceptions import AppError

from deckhub.service import report_svc

from deckhub.storage.database import (
    get_deck_repo,
    get_comment_repo,
    get_report_repo,
    get_notifier,
    get_current_user_id,
)
from deckhub.storage.deck.deck_interface import IDeckRepository
from deckhub.storage.comment.comment_interface import ICommentRepository
from deckhub.storage.report.report_interface import IReportRepository
from deckhub.notify.notifier_interface import INotificationSender

reports_router = APIRouter(prefix="/decks", tags=["reports"])


@reports_router.post("/{deck_id}/report", response_model=ReportResultOut)
def report_deck(
    deck_id: str,
    data: ReportCreate,
    user_id: str = Depends(get_current_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
    report_repo: IReportRepository = Depends(get_report_repo),
    notifier: INotificationSender = Depends(get_notifier),
):
    """
    通报卡组：不同通报人数达到阈值时自动隐藏卡组及其评论
    """
    try:
        result = report_svc.report_deck(
            deck_repo=deck_repo,
            comment_repo=comment_repo,
            report_repo=report_repo,
            notifier=notifier,
            deck_id=deck_id,
            user_id=user_id,
            reason=data.reason,
            details=data.details,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(result), status_code=201)
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("report_deck error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@reports_router.post("/{deck_id}/comments/{comment_id}/report", response_model=ReportResultOut)
def report_comment(
    deck_id: str,
    comment_id: str,
    data: ReportCreate,
    user_id: str = Depends(get_current_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
    report_repo: IReportRepository = Depends(get_report_repo),
    notifier: INotificationSender = Depends(get_notifier),
):
    """
    通报评论：不同通报人数达到阈值时自动隐藏这条评论
    """
    try:
        result = report_svc.report_comment(
            deck_repo=deck_repo,
            comment_repo=comment_repo,
            report_repo=report_repo,
            notifier=notifier,
            deck_id=deck_id,
            comment_id=comment_id,
            user_id=user_id,
            reason=data.reason,
            details=data.details,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(result), status_code=201)
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("report_comment error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)
