from typing import List

import pytest
from sqlalchemy.orm import sessionmaker

from deckhub.core.db import make_engine
from deckhub.models.registry import Base
from deckhub.schemas.comment import CommentCreate
from deckhub.schemas.deck import DeckPublish
from deckhub.schemas.user import UserProfileUpsert
from deckhub.service import deck_svc, comment_svc
from deckhub.storage.deck.SQLAlchemyDeckRepository import SQLAlchemyDeckRepository
from deckhub.storage.engagement.SQLAlchemyEngagementRepository import SQLAlchemyEngagementRepository
from deckhub.storage.comment.SQLAlchemyCommentRepository import SQLAlchemyCommentRepository
from deckhub.storage.report.SQLAlchemyReportRepository import SQLAlchemyReportRepository
from deckhub.storage.hashtag_summary.SQLAlchemyHashtagSummaryRepository import SQLAlchemyHashtagSummaryRepository
from deckhub.storage.api_key.SQLAlchemyApiKeyRepository import SQLAlchemyApiKeyRepository
from deckhub.storage.user.SQLAlchemyUserRepository import SQLAlchemyUserRepository


class FakeAssetStorage:
    """把暂存地址换成 /assets/deck_images/<owner>/<name>，记录删除调用"""

    def __init__(self, fail_on_move: bool = False):
        self.fail_on_move = fail_on_move
        self.moved: List[str] = []
        self.deleted: List[str] = []

    def move_staged(self, urls, owner_id):
        if self.fail_on_move:
            raise RuntimeError("storage unavailable")
        result = [f"/assets/deck_images/{owner_id}/{url.rsplit('/', 1)[-1]}" for url in urls]
        self.moved.extend(result)
        return result

    def delete(self, url):
        self.deleted.append(url)


class FlakyCommentRepo:
    """包装真实评论仓库：前 fail_times 次按卡组软删除评论时失败，其余调用原样转发"""

    def __init__(self, inner, fail_times: int = 1):
        self.inner = inner
        self.fail_times = fail_times

    def soft_delete_by_deck(self, deck_id):
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("comment cascade failed")
        return self.inner.soft_delete_by_deck(deck_id)

    def __getattr__(self, name):
        return getattr(self.inner, name)


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[tuple] = []

    def send(self, title, body):
        if self.fail:
            raise RuntimeError("webhook down")
        self.sent.append((title, body))

    @property
    def titles(self) -> List[str]:
        return [title for title, _ in self.sent]


def deck_id_for(n: int) -> str:
    """21 位卡组 id"""
    return f"deck{n:017d}"


def build_publish(deck_id: str, hashtags=None, song_id=None, is_unlisted=False, **extra) -> DeckPublish:
    return DeckPublish(
        id=deck_id,
        deck={
            "id": f"local-{deck_id}",
            "name": f"deck {deck_id}",
            "slots": [{"slot_id": i, "card_id": f"card-{i}", "limit_break": 0} for i in range(18)],
            "ace_slot_id": 0,
            "song_id": song_id,
        },
        comment="my deck",
        hashtags=hashtags or [],
        is_unlisted=is_unlisted,
        **extra,
    )


def ensure_user(user_repo, uid: str, display_name: str = None):
    """发布 / 评论前需要资料；显示名默认 Name-<uid>"""
    return user_repo.upsert_user(uid, UserProfileUpsert(display_name=display_name or f"Name-{uid}"))


@pytest.fixture
def engine(tmp_path):
    # 文件库：多个线程 / 会话共享同一个数据库
    engine = make_engine(f"sqlite:///{tmp_path / 'deckhub.sqlite3'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def deck_repo(db):
    return SQLAlchemyDeckRepository(db)


@pytest.fixture
def engagement_repo(db):
    return SQLAlchemyEngagementRepository(db)


@pytest.fixture
def comment_repo(db):
    return SQLAlchemyCommentRepository(db)


@pytest.fixture
def report_repo(db):
    return SQLAlchemyReportRepository(db)


@pytest.fixture
def summary_repo(db):
    return SQLAlchemyHashtagSummaryRepository(db)


@pytest.fixture
def api_key_repo(db):
    return SQLAlchemyApiKeyRepository(db)


@pytest.fixture
def user_repo(db):
    return SQLAlchemyUserRepository(db)


@pytest.fixture
def assets():
    return FakeAssetStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def publish(deck_repo, user_repo, assets):
    """在共享会话里发布卡组（没有资料时先创建），返回 DeckOut"""
    def _publish(n: int, user_id: str = "owner", **kwargs):
        if user_repo.get_user_by_uid(user_id) is None:
            ensure_user(user_repo, user_id)
        return deck_svc.publish_deck(
            deck_repo, user_repo, assets, build_publish(deck_id_for(n), **kwargs), user_id, to_dict=False
        )
    return _publish


@pytest.fixture
def comment_on(deck_repo, user_repo, comment_repo):
    """在共享会话里发表评论（评论者没有资料时先创建），返回 CommentOut"""
    def _comment(deck_id: str, user_id: str, text: str = "hello"):
        if user_repo.get_user_by_uid(user_id) is None:
            ensure_user(user_repo, user_id)
        return comment_svc.add_comment(
            deck_repo, user_repo, comment_repo, deck_id, user_id, CommentCreate(text=text), to_dict=False
        )
    return _comment


@pytest.fixture
def publish_detached(session_factory):
    """用独立会话发布并立即关闭（SQLite 下不占写锁），供多线程 / 接口测试使用"""
    def _publish(n: int, user_id: str = "owner", **kwargs):
        session = session_factory()
        try:
            user_repo = SQLAlchemyUserRepository(session)
            if user_repo.get_user_by_uid(user_id) is None:
                ensure_user(user_repo, user_id)
            return deck_svc.publish_deck(
                SQLAlchemyDeckRepository(session),
                user_repo,
                FakeAssetStorage(),
                build_publish(deck_id_for(n), **kwargs),
                user_id,
                to_dict=False,
            )
        finally:
            session.close()
    return _publish
