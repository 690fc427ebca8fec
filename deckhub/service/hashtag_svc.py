from collections import Counter
from datetime import datetime
from typing import Dict, Optional

from deckhub.schemas.hashtag import PopularHashtag, PopularHashtagSummaryOut

from deckhub.storage.deck.deck_interface import IDeckRepository
from deckhub.storage.hashtag_summary.hashtag_summary_interface import IHashtagSummaryRepository

from deckhub.core.config import get_settings
from deckhub.core.time import now_utc, days_ago
from deckhub.core.logx import logger


def aggregate_popular_hashtags(
    deck_repo: IDeckRepository,
    summary_repo: IHashtagSummaryRepository,
    period_days: Optional[int] = None,
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
    to_dict: bool = True,
) -> Dict | PopularHashtagSummaryOut:
    """
    汇总热门标签（由外部定时任务调用，可重复执行）：
    1. 取 now - period_days 之后发布的公共卡组（非不公开、未删除）
    2. 去掉首尾空白后按原样（区分大小写）计数
    3. 按次数倒序（次数相同按标签排序），取前 limit 个
    4. 整体覆盖该周期的汇总记录
    hashtags 字段缺失或格式不对的卡组直接跳过
    """
    settings = get_settings()
    if period_days is None:
        period_days = settings.hashtag_period_days
    if limit is None:
        limit = settings.hashtag_limit
    now = now or now_utc()

    counter: Counter = Counter()
    skipped = 0
    for hashtags in deck_repo.list_public_hashtags_since(days_ago(period_days, now)):
        if not isinstance(hashtags, list):
            skipped += 1
            continue
        for tag in hashtags:
            if not isinstance(tag, str):
                continue
            tag = tag.strip()
            if tag:
                counter[tag] += 1

    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))[:limit]
    summary = summary_repo.replace_summary(
        period_days=period_days,
        hashtags=[PopularHashtag(hashtag=tag, count=count) for tag, count in ranked],
        aggregated_at=now,
    )

    logger.info(
        f"Aggregated popular hashtags period_days={period_days}, "
        f"distinct={len(counter)}, kept={len(ranked)}, skipped_decks={skipped}"
    )
    return summary.model_dump() if to_dict else summary


def get_popular_hashtags(
    summary_repo: IHashtagSummaryRepository,
    period_days: Optional[int] = None,
    to_dict: bool = True,
) -> Dict | PopularHashtagSummaryOut:
    """
    读取热门标签汇总；还没有汇总过时返回空列表
    """
    if period_days is None:
        period_days = get_settings().hashtag_period_days
    summary = summary_repo.get_summary(period_days)
    if summary is None:
        summary = PopularHashtagSummaryOut(period_days=period_days, hashtags=[], aggregated_at=None)
    return summary.model_dump() if to_dict else summary
