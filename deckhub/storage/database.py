from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session, sessionmaker

from deckhub.core.config import get_settings
from deckhub.core.db import make_engine
from deckhub.core.exceptions import AuthenticationError
from deckhub.models.registry import Base

from deckhub.storage.deck.SQLAlchemyDeckRepository import SQLAlchemyDeckRepository
from deckhub.storage.engagement.SQLAlchemyEngagementRepository import SQLAlchemyEngagementRepository
from deckhub.storage.comment.SQLAlchemyCommentRepository import SQLAlchemyCommentRepository
from deckhub.storage.report.SQLAlchemyReportRepository import SQLAlchemyReportRepository
from deckhub.storage.hashtag_summary.SQLAlchemyHashtagSummaryRepository import SQLAlchemyHashtagSummaryRepository
from deckhub.storage.api_key.SQLAlchemyApiKeyRepository import SQLAlchemyApiKeyRepository
from deckhub.storage.user.SQLAlchemyUserRepository import SQLAlchemyUserRepository
from deckhub.storage.asset.LocalAssetStorage import LocalAssetStorage
from deckhub.notify.WebhookNotifier import WebhookNotifier
from deckhub.identity.ApiKeyIdentityProvider import ApiKeyIdentityProvider

# ======== 配置区（见 core/config.py，环境变量前缀 DECKHUB_） ========
settings = get_settings()
# ====================================================================

# SQLAlchemy 引擎
engine = make_engine(settings.database_url, echo=settings.db_echo)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """建表（已存在的表不会重复创建）"""
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 未来可以根据配置切换不同的实现
def get_deck_repo(db: Session = Depends(get_db)) -> SQLAlchemyDeckRepository:
    return SQLAlchemyDeckRepository(db)
def get_engagement_repo(db: Session = Depends(get_db)) -> SQLAlchemyEngagementRepository:
    return SQLAlchemyEngagementRepository(db)
def get_comment_repo(db: Session = Depends(get_db)) -> SQLAlchemyCommentRepository:
    return SQLAlchemyCommentRepository(db)
def get_report_repo(db: Session = Depends(get_db)) -> SQLAlchemyReportRepository:
    return SQLAlchemyReportRepository(db)
def get_hashtag_summary_repo(db: Session = Depends(get_db)) -> SQLAlchemyHashtagSummaryRepository:
    return SQLAlchemyHashtagSummaryRepository(db)
def get_api_key_repo(db: Session = Depends(get_db)) -> SQLAlchemyApiKeyRepository:
    return SQLAlchemyApiKeyRepository(db)
def get_user_repo(db: Session = Depends(get_db)) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db)


def get_asset_storage() -> LocalAssetStorage:
    return LocalAssetStorage(settings.asset_root, base_url=settings.asset_base_url)


# 进程内共用一个通知器（复用 requests.Session 的连接池），应用关闭时 close
notifier = WebhookNotifier(settings.report_webhook_url, timeout=settings.webhook_timeout_seconds)


def get_notifier() -> WebhookNotifier:
    return notifier


def get_identity_provider(
    api_key_repo: SQLAlchemyApiKeyRepository = Depends(get_api_key_repo),
) -> ApiKeyIdentityProvider:
    return ApiKeyIdentityProvider(api_key_repo)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    identity: ApiKeyIdentityProvider = Depends(get_identity_provider),
) -> str:
    """
    必须登录：Authorization: Bearer dk_<key_id>.<secret>
    校验失败在路由里统一转成 401
    """
    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationError("missing bearer credential")
    return identity.verify(token)


def get_optional_user_id(
    authorization: Optional[str] = Header(default=None),
    identity: ApiKeyIdentityProvider = Depends(get_identity_provider),
) -> Optional[str]:
    """
    可选登录：没有凭证按访客处理，凭证无效仍然报错
    """
    token = _bearer_token(authorization)
    if token is None:
        return None
    return identity.verify(token)
