from typing import Optional, List
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from deckhub.core.pagination import normalize_hashtags, MAX_HASHTAG_LENGTH
from deckhub.schemas.page import PageInfo, PageParams


class DeckOrderBy(str, Enum):
    PUBLISHED_AT = "published_at"
    VIEW_COUNT = "view_count"
    LIKE_COUNT = "like_count"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class DeckSlot(BaseModel):
    slot_id: int = Field(ge=0, le=17)
    card_id: Optional[str] = None
    limit_break: Optional[int] = Field(default=None, ge=0, le=5)


class DeckPayload(BaseModel):
    """
    卡组本体：18 个卡槽 + 王牌卡槽，其余为可选分类信息
    """
    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    slots: List[DeckSlot] = Field(min_length=18, max_length=18)
    ace_slot_id: Optional[int] = Field(default=None, ge=0, le=17)
    deck_type: Optional[str] = None
    song_id: Optional[str] = None
    live_grand_prix_id: Optional[str] = None
    live_grand_prix_detail_id: Optional[str] = None
    score: Optional[float] = None
    memo: Optional[str] = None


# 发布卡组
class DeckPublish(BaseModel):
    """
    发布卡组请求：
    - id 为调用方生成的 21 位公开 ID
    - hashtags 会被规范化（去空白、补 #、去重）
    - image_urls / thumbnail 为暂存区地址，发布时移动到正式目录
    """
    id: str = Field(min_length=21, max_length=21)
    deck: DeckPayload
    comment: Optional[str] = Field(default=None, max_length=1000)
    hashtags: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list, max_length=3)
    thumbnail: Optional[str] = None
    is_unlisted: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("hashtags")
    @classmethod
    def _normalize_hashtags(cls, value: List[str]) -> List[str]:
        hashtags = normalize_hashtags(value)
        for tag in hashtags:
            if len(tag) > MAX_HASHTAG_LENGTH:
                raise ValueError(f"hashtag longer than {MAX_HASHTAG_LENGTH} characters: {tag[:20]}...")
        return hashtags


class DeckCreate(BaseModel):
    """
    写入 published_decks 表（内部使用，资源已移动到正式目录）
    """
    id: str
    user_id: str
    user_name: str
    deck: DeckPayload
    comment: Optional[str] = None
    hashtags: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list)
    thumbnail: Optional[str] = None
    is_unlisted: bool = False


# 查看卡组
class DeckOut(BaseModel):
    id: str
    user_id: str
    user_name: str
    deck: DeckPayload
    comment: Optional[str] = None
    hashtags: List[str]
    image_urls: List[str]
    thumbnail: Optional[str] = None
    is_unlisted: bool
    view_count: int
    like_count: int
    liked_by_current_user: bool = False
    published_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DeckAdminOut(DeckOut):
    """
    包含软删除状态的卡组信息（内部 / 审计使用）
    """
    is_deleted: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BatchDecksOut(BaseModel):
    items: List[DeckOut]
    page_info: PageInfo

    model_config = ConfigDict(from_attributes=True)


class GetDecksParams(PageParams):
    """
    公共卡组列表参数
    """
    order_by: DeckOrderBy = DeckOrderBy.PUBLISHED_AT
    order: SortOrder = SortOrder.DESC
    user_id: Optional[str] = None
    song_id: Optional[str] = None
    tag: Optional[str] = None


class GetMyDecksParams(PageParams):
    order_by: DeckOrderBy = DeckOrderBy.PUBLISHED_AT
    order: SortOrder = SortOrder.DESC


class LikeCountOut(BaseModel):
    deck_id: str
    like_count: int


class ViewCountOut(BaseModel):
    deck_id: str
    view_count: int
