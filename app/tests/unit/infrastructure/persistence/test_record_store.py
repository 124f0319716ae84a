"""Unit tests for the in-memory record store and pagination helper."""

import pytest
from pydantic import ValidationError

from infrastructure.persistence import GuardRejectedError, InMemoryRecordStore, paginate
from modules.notifications.domain.models import Notification, NotificationStatus
from tests.factories import make_notification


@pytest.fixture
def store():
    return InMemoryRecordStore(Notification, name="notifications")


@pytest.mark.unit
class TestInMemoryRecordStore:
    def test_create_assigns_id(self, store):
        created = store.create(make_notification())

        assert created.id
        assert store.get(created.id) == created

    def test_create_keeps_explicit_id(self, store):
        created = store.create(make_notification(id="n-42"))

        assert created.id == "n-42"

    def test_create_rejects_duplicate_id(self, store):
        store.create(make_notification(id="n-1"))

        with pytest.raises(ValueError):
            store.create(make_notification(id="n-1"))

    def test_get_returns_copy(self, store):
        created = store.create(make_notification())

        fetched = store.get(created.id)
        fetched.title = "changed"

        assert store.get(created.id).title == "Deploy finished"

    def test_get_unknown_returns_none(self, store):
        assert store.get("missing") is None

    def test_update_applies_changes(self, store):
        created = store.create(make_notification())

        updated = store.update(created.id, {"status": NotificationStatus.SENT})

        assert updated.status == NotificationStatus.SENT
        assert store.get(created.id).status == NotificationStatus.SENT

    def test_update_unknown_returns_none(self, store):
        assert store.update("missing", {"title": "x"}) is None

    def test_update_guard_rejection_leaves_record_unchanged(self, store):
        created = store.create(make_notification())

        with pytest.raises(GuardRejectedError) as exc_info:
            store.update(
                created.id,
                {"status": NotificationStatus.SENT},
                guard=lambda n: n.status == NotificationStatus.SENT,
            )

        assert exc_info.value.current.status == NotificationStatus.PENDING
        assert store.get(created.id).status == NotificationStatus.PENDING

    def test_update_rejects_invalid_values(self, store):
        created = store.create(make_notification())

        with pytest.raises(ValidationError):
            store.update(created.id, {"status": "bogus"})

        assert store.get(created.id).status == NotificationStatus.PENDING

    def test_apply_uses_current_value(self, store):
        created = store.create(make_notification(metadata={"count": 1}))

        updated = store.apply(
            created.id, lambda n: {"metadata": {"count": n.metadata["count"] + 1}}
        )

        assert updated.metadata == {"count": 2}

    def test_update_many_counts_matches(self, store):
        store.create(make_notification(recipient="a"))
        store.create(make_notification(recipient="a"))
        store.create(make_notification(recipient="b"))

        count = store.update_many({"is_active": False}, where={"recipient": "a"})

        assert count == 2
        assert store.count(where={"is_active": False}) == 2

    def test_find_sorts_and_limits(self, store):
        for title in ("b", "c", "a"):
            store.create(make_notification(title=title))

        found = store.find(sort_by="title", descending=True, limit=2)

        assert [n.title for n in found] == ["c", "b"]

    def test_find_with_predicate(self, store):
        store.create(make_notification(title="keep"))
        store.create(make_notification(title="drop"))

        found = store.find(predicate=lambda n: n.title == "keep")

        assert len(found) == 1

    def test_delete(self, store):
        created = store.create(make_notification())

        assert store.delete(created.id) is True
        assert store.delete(created.id) is False


@pytest.mark.unit
class TestPaginate:
    def test_first_page_and_totals(self, store):
        for i in range(5):
            store.create(make_notification(title=f"n{i}"))

        page = paginate(store, sort_by="title", descending=False, page=1, limit=2)

        assert [n.title for n in page.data] == ["n0", "n1"]
        assert page.pagination.total == 5
        assert page.pagination.pages == 3

    def test_last_page(self, store):
        for i in range(5):
            store.create(make_notification(title=f"n{i}"))

        page = paginate(store, sort_by="title", descending=False, page=3, limit=2)

        assert [n.title for n in page.data] == ["n4"]

    def test_limit_is_clamped(self, store):
        page = paginate(store, limit=1000)

        assert page.pagination.limit == 100
        assert page.pagination.pages == 0

    def test_page_below_one_is_first_page(self, store):
        page = paginate(store, page=0)

        assert page.pagination.page == 1
