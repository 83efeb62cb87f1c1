# tests/test_storage.py

from datetime import datetime, timedelta, timezone

from simple_reviews.storage import ReviewStore


def test_meta_upsert_and_delete(store, add_review):
    post = add_review("Meta")

    assert store.get_post_meta(post.id, "sentiment") is None
    store.update_post_meta(post.id, "sentiment", "positive")
    store.update_post_meta(post.id, "sentiment", "negative")
    store.update_post_meta(post.id, "sentiment_score", 0.2)

    assert store.get_post_meta(post.id, "sentiment") == "negative"
    assert store.get_all_post_meta(post.id) == {"sentiment": "negative", "sentiment_score": "0.2"}

    assert store.delete_post_meta(post.id, "sentiment") == 1
    assert store.get_post_meta(post.id, "sentiment") is None


def test_in_set_query_uses_store_order(store, add_review):
    first = add_review("First")
    second = add_review("Second")
    third = add_review("Third")

    posts = store.get_posts(ids=[third.id, first.id])
    assert [p.id for p in posts] == [first.id, third.id]
    assert second.id not in [p.id for p in posts]


def test_ties_on_date_break_by_id(store):
    a = store.insert_post("product_review", "A")
    b = store.insert_post("product_review", "B", created_at=a.created_at)

    assert [p.id for p in store.get_posts(post_type="product_review")] == [b.id, a.id]


def test_delete_post_removes_meta(store, add_review):
    post = add_review("Gone", sentiment="positive", score=0.9)

    assert store.delete_post(post.id) is True
    assert store.get_post(post.id) is None
    assert store.get_all_post_meta(post.id) == {}
    assert store.delete_post(post.id) is False


def test_unpublished_posts_hidden(store):
    store.insert_post("product_review", "Draft", status="draft")
    assert store.get_posts(post_type="product_review") == []


def test_file_database(tmp_path):
    file_store = ReviewStore(f"sqlite:///{tmp_path / 'reviews.db'}")
    file_store.create_schema()
    post = file_store.insert_post("product_review", "Persisted")

    reopened = ReviewStore(f"sqlite:///{tmp_path / 'reviews.db'}")
    assert reopened.get_post(post.id).title == "Persisted"
    file_store.dispose()
    reopened.dispose()


def test_default_created_at_is_naive_utc(store):
    before = datetime.now(timezone.utc).replace(tzinfo=None)
    post = store.insert_post("product_review", "Now")

    assert post.created_at.tzinfo is None
    assert before - timedelta(seconds=1) <= store.get_post(post.id).created_at
