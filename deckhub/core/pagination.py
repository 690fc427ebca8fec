import math
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Query

from deckhub.core.config import get_settings
from deckhub.schemas.page import PageInfo


def normalize_page(page: Optional[int], per_page: Optional[int]) -> Tuple[int, int]:
    """
    规范化分页参数：
    - page 从 1 开始，非法值按 1 处理
    - per_page 缺省取配置默认值，并限制在 [1, max_per_page]
    """
    settings = get_settings()
    page = page if page and page >= 1 else 1
    if not per_page or per_page < 1:
        per_page = settings.default_per_page
    per_page = min(per_page, settings.max_per_page)
    return page, per_page


def build_page_info(page: int, per_page: int, total_count: int) -> PageInfo:
    """
    根据页码与总数计算分页信息：
    - total_pages = ceil(total_count / per_page)
    - has_next_page = 当前页 < 总页数
    - has_previous_page = 当前页 > 1
    """
    total_pages = math.ceil(total_count / per_page) if per_page else 0
    return PageInfo(
        current_page=page,
        per_page=per_page,
        total_count=total_count,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )


def paginate(query: Query, page: Optional[int], per_page: Optional[int]) -> Tuple[List, PageInfo]:
    """
    对同一个筛选条件的查询同时做计数和切片，保证 total_count 与切片的筛选条件一致。
    query 需要已经带上 order_by。
    """
    page, per_page = normalize_page(page, per_page)
    total = query.order_by(None).count()
    rows = (
        query
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return rows, build_page_info(page, per_page, total)


# 与 deck_hashtags.hashtag 列宽一致（含开头的 #）
MAX_HASHTAG_LENGTH = 100


def normalize_hashtag(tag: Optional[str]) -> Optional[str]:
    """
    "foo" / " #foo " / "#foo" 统一为 "#foo"；空字符串返回 None
    """
    if tag is None:
        return None
    tag = tag.strip()
    if not tag or tag == "#":
        return None
    return tag if tag.startswith("#") else f"#{tag}"


def normalize_hashtags(tags: Iterable[str]) -> List[str]:
    """规范化并按首次出现顺序去重"""
    result: List[str] = []
    for tag in tags:
        normalized = normalize_hashtag(tag)
        if normalized and normalized not in result:
            result.append(normalized)
    return result
