"""
热门标签汇总脚本，由 cron 每天 00:00 / 12:00 执行：

    python -m deckhub.scripts.aggregate_hashtags --period-days 30 --limit 50
"""
import argparse

from deckhub.core.config import get_settings
from deckhub.core.logx import logger
from deckhub.service import hashtag_svc
from deckhub.storage.database import SessionLocal, init_db
from deckhub.storage.deck.SQLAlchemyDeckRepository import SQLAlchemyDeckRepository
from deckhub.storage.hashtag_summary.SQLAlchemyHashtagSummaryRepository import SQLAlchemyHashtagSummaryRepository


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Aggregate popular hashtags of public decks")
    parser.add_argument("--period-days", type=int, default=settings.hashtag_period_days,
                        help="look back window in days (default: %(default)s)")
    parser.add_argument("--limit", type=int, default=settings.hashtag_limit,
                        help="number of hashtags to keep (default: %(default)s)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    init_db()

    db = SessionLocal()
    try:
        summary = hashtag_svc.aggregate_popular_hashtags(
            deck_repo=SQLAlchemyDeckRepository(db),
            summary_repo=SQLAlchemyHashtagSummaryRepository(db),
            period_days=args.period_days,
            limit=args.limit,
            to_dict=False,
        )
    except Exception:
        logger.exception("hashtag aggregation failed")
        return 1
    finally:
        db.close()

    top = ", ".join(f"{h.hashtag}({h.count})" for h in summary.hashtags[:5])
    logger.info(f"top hashtags: {top or '(none)'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
