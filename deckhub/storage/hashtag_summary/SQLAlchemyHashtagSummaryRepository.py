# deckhub/storage/hashtag_summary/SQLAlchemyHashtagSummaryRepository.py

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from deckhub.models.hashtag_summary import PopularHashtagSummary
from deckhub.schemas.hashtag import PopularHashtag, PopularHashtagSummaryOut
from deckhub.storage.hashtag_summary.hashtag_summary_interface import IHashtagSummaryRepository
from deckhub.core.db import transaction


class SQLAlchemyHashtagSummaryRepository(IHashtagSummaryRepository):

    def __init__(self, db: Session):
        self.db = db

    def get_summary(self, period_days: int) -> Optional[PopularHashtagSummaryOut]:
        summary = self.db.get(PopularHashtagSummary, period_days)
        return PopularHashtagSummaryOut.model_validate(summary) if summary else None

    def replace_summary(
        self, period_days: int, hashtags: List[PopularHashtag], aggregated_at: datetime
    ) -> PopularHashtagSummaryOut:
        # merge = 按主键 upsert，整体覆盖旧的排行
        with transaction(self.db):
            summary = self.db.merge(
                PopularHashtagSummary(
                    period_days=period_days,
                    hashtags=[item.model_dump() for item in hashtags],
                    aggregated_at=aggregated_at,
                )
            )

        self.db.refresh(summary)
        return PopularHashtagSummaryOut.model_validate(summary)
