# 导入所有模型，保证 Base.metadata 中包含全部表
from deckhub.models.base import Base
from deckhub.models.deck import PublishedDeck, DeckHashtag
from deckhub.models.engagement import DeckLike, DeckView
from deckhub.models.comment import DeckComment
from deckhub.models.report import DeckReport, DeckCommentReport
from deckhub.models.hashtag_summary import PopularHashtagSummary
from deckhub.models.api_key import ApiKey
from deckhub.models.user import UserProfile

__all__ = [
    "Base",
    "PublishedDeck",
    "DeckHashtag",
    "DeckLike",
    "DeckView",
    "DeckComment",
    "DeckReport",
    "DeckCommentReport",
    "PopularHashtagSummary",
    "ApiKey",
    "UserProfile",
]
