from datetime import timedelta

from deckhub.core.pagination import normalize_hashtag, normalize_hashtags
from deckhub.core.time import now_utc
from deckhub.models.deck import PublishedDeck
from deckhub.service import hashtag_svc

from conftest import deck_id_for


def _counts(summary):
    return [(h.hashtag, h.count) for h in summary.hashtags]


def test_normalize_hashtag():
    assert normalize_hashtag("foo") == "#foo"
    assert normalize_hashtag("  #foo ") == "#foo"
    assert normalize_hashtag("") is None
    assert normalize_hashtag("#") is None
    assert normalize_hashtags(["a", "#a", " b"]) == ["#a", "#b"]


def test_aggregate_counts_and_orders(publish, deck_repo, summary_repo):
    publish(1, hashtags=["#a"])
    publish(2, hashtags=["#a", "#b"])
    publish(3, hashtags=["#a"])

    summary = hashtag_svc.aggregate_popular_hashtags(deck_repo, summary_repo, period_days=30, to_dict=False)

    assert _counts(summary) == [("#a", 3), ("#b", 1)]
    assert summary.aggregated_at is not None


def test_aggregate_is_case_sensitive_and_breaks_ties_by_name(publish, deck_repo, summary_repo):
    publish(1, hashtags=["#Foo", "#b"])
    publish(2, hashtags=["#foo"])

    summary = hashtag_svc.aggregate_popular_hashtags(deck_repo, summary_repo, to_dict=False)
    assert _counts(summary) == [("#Foo", 1), ("#b", 1), ("#foo", 1)]


def test_aggregate_skips_malformed_values(publish, db, deck_repo, summary_repo):
    publish(1, hashtags=["#a"])
    publish(2)
    publish(3)
    publish(4)
    db.query(PublishedDeck).filter(PublishedDeck.id == deck_id_for(2)).update(
        {PublishedDeck.hashtags: "oops"}, synchronize_session=False
    )
    db.query(PublishedDeck).filter(PublishedDeck.id == deck_id_for(3)).update(
        {PublishedDeck.hashtags: [1, None, " #a "]}, synchronize_session=False
    )
    db.query(PublishedDeck).filter(PublishedDeck.id == deck_id_for(4)).update(
        {PublishedDeck.hashtags: {"tag": "#a"}}, synchronize_session=False
    )
    db.commit()

    summary = hashtag_svc.aggregate_popular_hashtags(deck_repo, summary_repo, to_dict=False)
    assert _counts(summary) == [("#a", 2)]


def test_aggregate_respects_window_and_visibility(publish, db, deck_repo, summary_repo):
    publish(1, hashtags=["#old"])
    publish(2, hashtags=["#new"])
    publish(3, hashtags=["#hidden"], is_unlisted=True)
    publish(4, hashtags=["#gone"])
    deck_repo.soft_delete_deck(deck_id_for(4))
    db.query(PublishedDeck).filter(PublishedDeck.id == deck_id_for(1)).update(
        {PublishedDeck.published_at: now_utc() - timedelta(days=40)}, synchronize_session=False
    )
    db.commit()

    summary = hashtag_svc.aggregate_popular_hashtags(deck_repo, summary_repo, period_days=30, to_dict=False)
    assert _counts(summary) == [("#new", 1)]


def test_aggregate_truncates_to_limit(publish, deck_repo, summary_repo):
    publish(1, hashtags=["#a", "#b", "#c"])
    publish(2, hashtags=["#a", "#b"])
    publish(3, hashtags=["#a"])

    summary = hashtag_svc.aggregate_popular_hashtags(deck_repo, summary_repo, limit=2, to_dict=False)
    assert _counts(summary) == [("#a", 3), ("#b", 2)]


def test_aggregate_overwrites_previous_summary(publish, deck_repo, summary_repo):
    publish(1, hashtags=["#a"])
    hashtag_svc.aggregate_popular_hashtags(deck_repo, summary_repo, period_days=30)

    deck_repo.soft_delete_deck(deck_id_for(1))
    publish(2, hashtags=["#z"])
    hashtag_svc.aggregate_popular_hashtags(deck_repo, summary_repo, period_days=30)

    stored = hashtag_svc.get_popular_hashtags(summary_repo, period_days=30, to_dict=False)
    assert _counts(stored) == [("#z", 1)]


def test_get_popular_hashtags_before_first_run(summary_repo):
    summary = hashtag_svc.get_popular_hashtags(summary_repo, period_days=30, to_dict=False)
    assert summary.hashtags == []
    assert summary.aggregated_at is None


def test_explicit_zero_is_not_replaced_by_defaults(publish, deck_repo, summary_repo):
    publish(1, hashtags=["#a"])

    summary = hashtag_svc.aggregate_popular_hashtags(deck_repo, summary_repo, period_days=30, limit=0, to_dict=False)
    assert summary.hashtags == []

    empty = hashtag_svc.get_popular_hashtags(summary_repo, period_days=0, to_dict=False)
    assert empty.period_days == 0
    assert empty.hashtags == []
