"""Tests for the social graph store."""

import pytest

from pulse_feed.core.errors import NotFound
from pulse_feed.services import graph, mutations


def test_follow_counts_start_at_zero(db_session, alice) -> None:
    assert graph.follow_counts(db_session, alice.id) == {"followers": 0, "following": 0}


def test_follow_counts_follow_edges(db_session, alice, bob, carol) -> None:
    mutations.toggle_follow(db_session, alice, bob.id)
    mutations.toggle_follow(db_session, carol, bob.id)
    mutations.toggle_follow(db_session, bob, alice.id)

    assert graph.follow_counts(db_session, bob.id) == {"followers": 2, "following": 1}
    assert graph.follow_counts(db_session, alice.id) == {"followers": 1, "following": 1}
    assert graph.is_following(db_session, alice.id, bob.id) is True
    assert graph.is_following(db_session, bob.id, carol.id) is False


def test_followed_ids_and_following_among(db_session, alice, bob, carol) -> None:
    mutations.toggle_follow(db_session, alice, bob.id)

    assert graph.followed_ids(db_session, alice.id) == [bob.id]
    assert graph.following_among(db_session, alice.id, [bob.id, carol.id]) == {bob.id}
    assert graph.following_among(db_session, alice.id, []) == set()


def test_followers_listing_marks_viewer_follows(db_session, alice, bob, carol) -> None:
    mutations.toggle_follow(db_session, alice, carol.id)
    mutations.toggle_follow(db_session, bob, carol.id)
    mutations.toggle_follow(db_session, alice, bob.id)

    page = graph.get_followers(db_session, carol.id, alice)

    assert [entry.user.username for entry in page.items] == ["bob", "alice"]
    assert [entry.is_followed_by_me for entry in page.items] == [True, False]
    assert page.is_done is True


def test_followers_listing_for_anonymous_viewer(db_session, alice, bob) -> None:
    mutations.toggle_follow(db_session, alice, bob.id)

    page = graph.get_followers(db_session, bob.id, None)

    assert len(page.items) == 1
    assert page.items[0].is_followed_by_me is False


def test_own_following_list_is_all_followed(db_session, alice, bob, carol) -> None:
    mutations.toggle_follow(db_session, alice, bob.id)
    mutations.toggle_follow(db_session, alice, carol.id)

    page = graph.get_following(db_session, alice.id, alice)

    assert [entry.user.username for entry in page.items] == ["carol", "bob"]
    assert all(entry.is_followed_by_me for entry in page.items)


def test_someone_elses_following_list(db_session, alice, bob, carol) -> None:
    mutations.toggle_follow(db_session, bob, alice.id)
    mutations.toggle_follow(db_session, bob, carol.id)
    mutations.toggle_follow(db_session, alice, carol.id)

    page = graph.get_following(db_session, bob.id, alice)

    flags = {entry.user.username: entry.is_followed_by_me for entry in page.items}
    assert flags == {"alice": False, "carol": True}


def test_follow_listings_paginate(db_session, alice, make_user) -> None:
    followers = [make_user(f"fan{i}") for i in range(5)]
    for fan in followers:
        mutations.toggle_follow(db_session, fan, alice.id)

    seen: list[str] = []
    cursor = None
    pages = 0
    while True:
        page = graph.get_followers(db_session, alice.id, None, cursor, 2)
        seen.extend(entry.user.username for entry in page.items)
        pages += 1
        if page.is_done:
            break
        cursor = page.continue_cursor

    assert pages == 3
    assert seen == [f"fan{i}" for i in reversed(range(5))]


def test_unfollow_removes_entry(db_session, alice, bob) -> None:
    mutations.toggle_follow(db_session, alice, bob.id)
    mutations.toggle_follow(db_session, alice, bob.id)

    assert graph.get_followers(db_session, bob.id, None).items == []
    assert graph.is_following(db_session, alice.id, bob.id) is False


@pytest.mark.parametrize("listing", [graph.get_followers, graph.get_following])
def test_listings_for_unknown_user(db_session, listing) -> None:
    with pytest.raises(NotFound):
        listing(db_session, 404, None)
