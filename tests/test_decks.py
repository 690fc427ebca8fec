import pytest

from deckhub.core.exceptions import DeckAlreadyExists, DeckNotFound, ForbiddenAction, UserNotFound
from deckhub.models.engagement import DeckLike, DeckView
from deckhub.schemas.deck import GetDecksParams, GetMyDecksParams, DeckOrderBy, SortOrder
from deckhub.schemas.page import PageParams
from deckhub.service import deck_svc, comment_svc

from conftest import FakeAssetStorage, FlakyCommentRepo, build_publish, deck_id_for, ensure_user


class FailingCreateRepo:
    """包装真实仓库，写库时失败"""

    def __init__(self, inner):
        self.inner = inner

    def exists(self, deck_id):
        return self.inner.exists(deck_id)

    def create_deck(self, data):
        raise RuntimeError("db write failed")


# -------------------------- 发布 -------------------------- #

def test_publish_sets_defaults_and_moves_assets(deck_repo, user_repo, assets):
    ensure_user(user_repo, "owner", "Owner")
    data = build_publish(
        deck_id_for(1),
        hashtags=["  foo", "#bar", "foo"],
        song_id="song-1",
        image_urls=["/assets/tmp/a.png", "/assets/tmp/b.jpg"],
        thumbnail="/assets/tmp/t.webp",
    )
    deck = deck_svc.publish_deck(deck_repo, user_repo, assets, data, "owner", to_dict=False)

    assert deck.like_count == 0 and deck.view_count == 0
    assert deck.is_unlisted is False
    assert deck.hashtags == ["#foo", "#bar"]
    assert deck.image_urls == ["/assets/deck_images/owner/a.png", "/assets/deck_images/owner/b.jpg"]
    assert deck.thumbnail == "/assets/deck_images/owner/t.webp"
    assert deck.deck.song_id == "song-1"
    assert deck.user_name == "Owner"


def test_publish_existing_id_conflicts_before_moving_assets(publish, deck_repo, user_repo):
    publish(1)
    assets = FakeAssetStorage()
    data = build_publish(deck_id_for(1), image_urls=["/assets/tmp/a.png"])

    with pytest.raises(DeckAlreadyExists):
        deck_svc.publish_deck(deck_repo, user_repo, assets, data, "owner")
    assert assets.moved == []


def test_publish_failure_rolls_back_moved_assets(deck_repo, user_repo):
    ensure_user(user_repo, "owner")
    assets = FakeAssetStorage()
    data = build_publish(deck_id_for(1), image_urls=["/assets/tmp/a.png"], thumbnail="/assets/tmp/t.png")

    with pytest.raises(RuntimeError):
        deck_svc.publish_deck(FailingCreateRepo(deck_repo), user_repo, assets, data, "owner")

    assert sorted(assets.deleted) == sorted(assets.moved)
    assert len(assets.moved) == 2
    assert not deck_repo.exists(deck_id_for(1))


def test_publish_asset_failure_leaves_no_deck(deck_repo, user_repo):
    ensure_user(user_repo, "owner")
    data = build_publish(deck_id_for(1), image_urls=["/assets/tmp/a.png"])
    with pytest.raises(RuntimeError):
        deck_svc.publish_deck(deck_repo, user_repo, FakeAssetStorage(fail_on_move=True), data, "owner")
    assert not deck_repo.exists(deck_id_for(1))


def test_publish_without_profile_moves_nothing(deck_repo, user_repo, assets):
    data = build_publish(deck_id_for(1), image_urls=["/assets/tmp/a.png"])

    with pytest.raises(UserNotFound):
        deck_svc.publish_deck(deck_repo, user_repo, assets, data, "ghost")
    assert assets.moved == []
    assert not deck_repo.exists(deck_id_for(1))


def test_hashtag_length_limited():
    ok = build_publish(deck_id_for(1), hashtags=["#" + "a" * 99])
    assert ok.hashtags == ["#" + "a" * 99]

    # 没有 # 的标签补上 # 之后再算长度
    with pytest.raises(ValueError):
        build_publish(deck_id_for(1), hashtags=["a" * 100])
    with pytest.raises(ValueError):
        build_publish(deck_id_for(1), hashtags=["#" + "a" * 100])


# -------------------------- 查询) -------------------------- #

def test_unlisted_deck_readable_by_id_but_not_listed(publish, deck_repo, engagement_repo):
    publish(1, is_unlisted=True)
    publish(2)

    deck = deck_svc.get_published_deck(deck_repo, engagement_repo, deck_id_for(1), to_dict=False)
    assert deck.is_unlisted is True

    listed = deck_svc.list_published_decks(deck_repo, engagement_repo, GetDecksParams(), to_dict=False)
    assert [d.id for d in listed.items] == [deck_id_for(2)]
    assert listed.page_info.total_count == 1


def test_pagination_second_page(publish, deck_repo, engagement_repo):
    for n in range(25):
        publish(n)

    result = deck_svc.list_published_decks(
        deck_repo, engagement_repo, GetDecksParams(page=2, per_page=10), to_dict=False
    )

    assert len(result.items) == 10
    info = result.page_info
    assert info.total_count == 25
    assert info.total_pages == 3
    assert info.has_next_page is True
    assert info.has_previous_page is True


def test_pages_do_not_overlap(publish, deck_repo, engagement_repo):
    for n in range(7):
        publish(n)

    seen = []
    for page in (1, 2, 3):
        result = deck_svc.list_published_decks(
            deck_repo, engagement_repo, GetDecksParams(page=page, per_page=3), to_dict=False
        )
        seen.extend(d.id for d in result.items)
    assert sorted(seen) == sorted(deck_id_for(n) for n in range(7))


def test_tag_filter_with_or_without_hash(publish, deck_repo, engagement_repo):
    publish(1, hashtags=["#foo"])
    publish(2, hashtags=["foo", "bar"])
    publish(3, hashtags=["#bar"])

    plain = deck_svc.list_published_decks(deck_repo, engagement_repo, GetDecksParams(tag="foo"), to_dict=False)
    hashed = deck_svc.list_published_decks(deck_repo, engagement_repo, GetDecksParams(tag="#foo"), to_dict=False)

    assert [d.id for d in plain.items] == [d.id for d in hashed.items]
    assert {d.id for d in plain.items} == {deck_id_for(1), deck_id_for(2)}
    assert plain.page_info.total_count == 2


def test_filter_by_user_and_song(publish, deck_repo, engagement_repo):
    publish(1, user_id="alice", song_id="s1")
    publish(2, user_id="alice", song_id="s2")
    publish(3, user_id="bob", song_id="s1")

    by_user = deck_svc.list_published_decks(deck_repo, engagement_repo, GetDecksParams(user_id="alice"), to_dict=False)
    assert {d.id for d in by_user.items} == {deck_id_for(1), deck_id_for(2)}

    by_song = deck_svc.list_published_decks(deck_repo, engagement_repo, GetDecksParams(song_id="s1"), to_dict=False)
    assert {d.id for d in by_song.items} == {deck_id_for(1), deck_id_for(3)}


def test_order_by_like_count(publish, deck_repo, engagement_repo):
    for n in range(3):
        publish(n)
    engagement_repo.add_like(deck_id_for(1), "a")
    engagement_repo.add_like(deck_id_for(1), "b")
    engagement_repo.add_like(deck_id_for(2), "a")

    desc = deck_svc.list_published_decks(
        deck_repo, engagement_repo, GetDecksParams(order_by=DeckOrderBy.LIKE_COUNT), to_dict=False
    )
    assert [d.id for d in desc.items] == [deck_id_for(1), deck_id_for(2), deck_id_for(0)]

    asc = deck_svc.list_published_decks(
        deck_repo,
        engagement_repo,
        GetDecksParams(order_by=DeckOrderBy.LIKE_COUNT, order=SortOrder.ASC),
        to_dict=False,
    )
    assert [d.id for d in asc.items] == [deck_id_for(0), deck_id_for(2), deck_id_for(1)]


def test_my_decks_include_unlisted(publish, deck_repo, engagement_repo):
    publish(1, user_id="alice", is_unlisted=True)
    publish(2, user_id="alice")
    publish(3, user_id="bob")

    mine = deck_svc.list_my_decks(deck_repo, engagement_repo, GetMyDecksParams(), "alice", to_dict=False)
    assert {d.id for d in mine.items} == {deck_id_for(1), deck_id_for(2)}


def test_liked_decks_most_recent_like_first(publish, deck_repo, engagement_repo):
    for n in range(3):
        publish(n)
    engagement_repo.add_like(deck_id_for(2), "alice")
    engagement_repo.add_like(deck_id_for(0), "alice")
    engagement_repo.add_like(deck_id_for(1), "bob")

    liked = deck_svc.list_liked_decks(deck_repo, PageParams(), "alice", to_dict=False)
    assert [d.id for d in liked.items] == [deck_id_for(0), deck_id_for(2)]
    assert all(d.liked_by_current_user for d in liked.items)


# -------------------------- 删除 -------------------------- #

def test_delete_cascades(publish, comment_on, db, deck_repo, engagement_repo, comment_repo, assets):
    deck = publish(1, image_urls=["/assets/tmp/a.png"], thumbnail="/assets/tmp/t.png")
    engagement_repo.add_like(deck.id, "alice")
    engagement_repo.record_view(deck.id, "alice")
    c1 = comment_on(deck.id, "alice", "nice")
    c2 = comment_on(deck.id, "bob", "cool")

    assert deck_svc.delete_deck(deck_repo, engagement_repo, comment_repo, assets, deck.id, "owner")

    with pytest.raises(DeckNotFound):
        deck_svc.get_published_deck(deck_repo, engagement_repo, deck.id)

    audit = deck_repo.admin_get_deck(deck.id)
    assert audit.is_deleted is True
    assert audit.deleted_at is not None
    assert audit.like_count == 0 and audit.view_count == 0
    assert db.query(DeckLike).count() == 0
    assert db.query(DeckView).count() == 0

    for c in (c1, c2):
        hidden = comment_svc.get_comment(comment_repo, deck.id, c.id, to_dict=False)
        assert hidden.is_deleted is True

    assert sorted(assets.deleted) == sorted(deck.image_urls + [deck.thumbnail])


def test_delete_by_non_owner_is_forbidden(publish, deck_repo, engagement_repo, comment_repo, assets):
    deck = publish(1, user_id="alice")
    with pytest.raises(ForbiddenAction):
        deck_svc.delete_deck(deck_repo, engagement_repo, comment_repo, assets, deck.id, "mallory")
    assert deck_repo.get_deck(deck.id) is not None


def test_delete_missing_deck(deck_repo, engagement_repo, comment_repo, assets):
    with pytest.raises(DeckNotFound):
        deck_svc.delete_deck(deck_repo, engagement_repo, comment_repo, assets, deck_id_for(5), "owner")


def test_asset_cleanup_failure_does_not_fail_delete(publish, deck_repo, engagement_repo, comment_repo):
    class BrokenDelete(FakeAssetStorage):
        def delete(self, url):
            raise OSError("disk gone")

    deck = publish(1, image_urls=["/assets/tmp/a.png"])
    assert deck_svc.delete_deck(deck_repo, engagement_repo, comment_repo, BrokenDelete(), deck.id, "owner")
    assert deck_repo.get_deck(deck.id) is None


def test_owner_retry_finishes_partial_delete(publish, comment_on, db, deck_repo, engagement_repo, comment_repo, assets):
    deck = publish(1)
    engagement_repo.add_like(deck.id, "alice")
    engagement_repo.record_view(deck.id, "alice")
    c = comment_on(deck.id, "alice")
    flaky = FlakyCommentRepo(comment_repo)

    # 卡组已软删除、点赞浏览已清掉，评论级联失败
    with pytest.raises(RuntimeError):
        deck_svc.delete_deck(deck_repo, engagement_repo, flaky, assets, deck.id, "owner")
    assert deck_repo.get_deck(deck.id) is None
    assert comment_svc.get_comment(comment_repo, deck.id, c.id, to_dict=False).is_deleted is False

    with pytest.raises(ForbiddenAction):
        deck_svc.delete_deck(deck_repo, engagement_repo, flaky, assets, deck.id, "mallory")

    assert deck_svc.delete_deck(deck_repo, engagement_repo, flaky, assets, deck.id, "owner")
    assert comment_svc.get_comment(comment_repo, deck.id, c.id, to_dict=False).is_deleted is True
    assert db.query(DeckLike).count() == 0
    assert db.query(DeckView).count() == 0
    assert deck_repo.admin_get_deck(deck.id).like_count == 0
