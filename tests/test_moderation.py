import pytest

from deckhub.core.exceptions import CommentNotFound, DeckNotFound
from deckhub.models.report import DeckReport, DeckCommentReport, ReportReason
from deckhub.schemas.page import PageParams
from deckhub.service import comment_svc, report_svc
from deckhub.service.moderation import should_hide

from conftest import FlakyCommentRepo, RecordingNotifier, deck_id_for


def _report(deck_repo, comment_repo, report_repo, notifier, deck_id, user_id):
    return report_svc.report_deck(
        deck_repo, comment_repo, report_repo, notifier, deck_id, user_id, ReportReason.SPAM, None, to_dict=False
    )


def test_should_hide_threshold():
    assert not should_hide(4)
    assert should_hide(5)
    assert should_hide(6)
    assert should_hide(2, threshold=2)


def test_same_user_reporting_repeatedly_does_not_hide(publish, deck_repo, comment_repo, report_repo, db, notifier):
    deck = publish(1)
    for _ in range(4):
        result = _report(deck_repo, comment_repo, report_repo, notifier, deck.id, "alice")

    assert result.distinct_reporters == 1
    assert result.hidden is False
    assert deck_repo.get_deck(deck.id) is not None
    assert db.query(DeckReport).count() == 4
    assert notifier.titles == ["Deck reported"] * 4


def test_five_distinct_reporters_hide_deck_and_comments(publish, comment_on, deck_repo, comment_repo, report_repo, notifier):
    deck = publish(1)
    c = comment_on(deck.id, "zed", "hi")

    results = [_report(deck_repo, comment_repo, report_repo, notifier, deck.id, f"user-{i}") for i in range(5)]

    assert [r.hidden for r in results] == [False, False, False, False, True]
    assert results[-1].distinct_reporters == 5
    assert deck_repo.get_deck(deck.id) is None
    assert deck_repo.admin_get_deck(deck.id).is_deleted is True
    assert comment_svc.get_comment(comment_repo, deck.id, c.id, to_dict=False).is_deleted is True
    assert notifier.titles.count("Deck hidden automatically") == 1


def test_report_after_hidden_is_recorded_without_second_notification(publish, deck_repo, comment_repo, report_repo, db, notifier):
    deck = publish(1)
    for i in range(5):
        _report(deck_repo, comment_repo, report_repo, notifier, deck.id, f"user-{i}")

    sixth = _report(deck_repo, comment_repo, report_repo, notifier, deck.id, "user-5")

    assert sixth.hidden is False
    assert sixth.distinct_reporters == 6
    assert db.query(DeckReport).count() == 6
    assert notifier.titles.count("Deck hidden automatically") == 1


def test_escalation_failure_keeps_report(publish, deck_repo, comment_repo, report_repo, db, notifier):
    class BrokenHide:
        def __init__(self, inner):
            self.inner = inner

        def admin_get_deck(self, deck_id):
            return self.inner.admin_get_deck(deck_id)

        def soft_delete_deck(self, deck_id):
            raise RuntimeError("db hiccup")

    deck = publish(1)
    for i in range(4):
        _report(deck_repo, comment_repo, report_repo, notifier, deck.id, f"user-{i}")

    result = _report(BrokenHide(deck_repo), comment_repo, report_repo, notifier, deck.id, "user-4")

    assert result.hidden is False
    assert db.query(DeckReport).count() == 5
    assert deck_repo.get_deck(deck.id) is not None

    # 下一次通报重新评估并完成隐藏
    retry = _report(deck_repo, comment_repo, report_repo, notifier, deck.id, "user-5")
    assert retry.hidden is True


def test_comment_cascade_failure_completed_by_next_report(publish, comment_on, deck_repo, comment_repo, report_repo, notifier):
    deck = publish(1)
    c = comment_on(deck.id, "zed", "hi")
    flaky = FlakyCommentRepo(comment_repo)
    for i in range(4):
        _report(deck_repo, flaky, report_repo, notifier, deck.id, f"user-{i}")

    # 卡组已隐藏，评论级联失败
    fifth = _report(deck_repo, flaky, report_repo, notifier, deck.id, "user-4")
    assert fifth.hidden is True
    assert deck_repo.get_deck(deck.id) is None
    assert comment_svc.get_comment(comment_repo, deck.id, c.id, to_dict=False).is_deleted is False

    sixth = _report(deck_repo, flaky, report_repo, notifier, deck.id, "user-5")
    assert sixth.hidden is False
    assert comment_svc.get_comment(comment_repo, deck.id, c.id, to_dict=False).is_deleted is True
    assert notifier.titles.count("Deck hidden automatically") == 1


def test_notification_failure_does_not_break_report(publish, deck_repo, comment_repo, report_repo, db):
    deck = publish(1)
    result = _report(deck_repo, comment_repo, report_repo, RecordingNotifier(fail=True), deck.id, "alice")
    assert result.distinct_reporters == 1
    assert db.query(DeckReport).count() == 1


def test_report_missing_deck(deck_repo, comment_repo, report_repo, notifier):
    with pytest.raises(DeckNotFound):
        _report(deck_repo, comment_repo, report_repo, notifier, deck_id_for(42), "alice")
    assert notifier.sent == []


def test_comment_hidden_after_five_distinct_reporters(publish, comment_on, deck_repo, comment_repo, report_repo, db, notifier):
    deck = publish(1)
    c = comment_on(deck.id, "zed", "spam")
    keep = comment_on(deck.id, "amy", "ok")

    results = [
        report_svc.report_comment(
            deck_repo, comment_repo, report_repo, notifier, deck.id, c.id, f"user-{i}",
            ReportReason.INAPPROPRIATE_CONTENT, "rude", to_dict=False,
        )
        for i in range(5)
    ]

    assert results[-1].hidden is True
    assert db.query(DeckCommentReport).count() == 5
    listed = comment_svc.list_comments(deck_repo, comment_repo, deck.id, PageParams(), to_dict=False)
    assert [x.id for x in listed.items] == [keep.id]
    assert deck_repo.get_deck(deck.id) is not None
    assert notifier.titles.count("Comment hidden automatically") == 1


def test_report_comment_of_other_deck(publish, comment_on, deck_repo, comment_repo, report_repo, notifier):
    publish(1)
    other = publish(2)
    c = comment_on(deck_id_for(1), "zed", "x")

    with pytest.raises(CommentNotFound):
        report_svc.report_comment(
            deck_repo, comment_repo, report_repo, notifier, other.id, c.id, "alice", ReportReason.OTHER
        )
