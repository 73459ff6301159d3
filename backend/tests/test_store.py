"""Tests for the SQLAlchemy-backed document store."""
import pytest

from officer_records.store import DocumentNotFound, WriteOp


class TestQuery:
    def test_empty_collection_returns_empty_list(self, store):
        assert store.query("officers") == []

    def test_equality_filter_keeps_insertion_order(self, store):
        first = store.add("marks", {"officerId": "a", "marks": 1})
        store.add("marks", {"officerId": "b", "marks": 2})
        third = store.add("marks", {"officerId": "a", "marks": 3})

        found = store.query("marks", {"officerId": "a"})

        assert [d.id for d in found] == [first, third]
        assert [d.get("marks") for d in found] == [1, 3]

    def test_multiple_fields_must_all_match(self, store):
        store.add("courses", {"type": "Optional", "category": "Sea"})
        wanted = store.add("courses", {"type": "Optional", "category": "Shore"})

        found = store.query("courses", {"type": "Optional", "category": "Shore"})

        assert [d.id for d in found] == [wanted]

    def test_string_filter_does_not_match_other_types(self, store):
        store.add("marks", {"officerId": 7, "marks": 1})
        wanted = store.add("marks", {"officerId": "7", "marks": 2})

        assert [d.id for d in store.query("marks", {"officerId": "7"})] == [wanted]

    def test_string_and_numeric_filters_combine(self, store):
        store.add("traits", {"officerId": "a", "tap": 1})
        wanted = store.add("traits", {"officerId": "a", "tap": 2})
        store.add("traits", {"officerId": "b", "tap": 2})

        assert [d.id for d in store.query("traits", {"officerId": "a", "tap": 2})] == [wanted]

    def test_filter_on_missing_field(self, store):
        store.add("courses", {"type": "Optional"})

        assert store.query("courses", {"category": "Sea"}) == []

    def test_string_values_with_quotes(self, store):
        wanted = store.add("warnings", {"offense": 'Said "no" to orders'})

        assert [d.id for d in store.query("warnings", {"offense": 'Said "no" to orders'})] == [wanted]

    def test_limit(self, store):
        for i in range(4):
            store.add("traits", {"officerId": "a", "n": i})

        assert len(store.query("traits", {"officerId": "a"}, limit=2)) == 2

    def test_collections_are_isolated(self, store):
        store.add("leave", {"officerId": "a"})

        assert store.query("medical", {"officerId": "a"}) == []


class TestWrites:
    def test_get_missing_returns_none(self, store):
        assert store.get("officers", "nope") is None

    def test_add_then_get(self, store):
        doc_id = store.add("class", {"name": "Alpha", "instructorId": "i1"})

        doc = store.get("class", doc_id)

        assert doc.to_dict() == {"id": doc_id, "name": "Alpha", "instructorId": "i1"}

    def test_update_merges_fields(self, store):
        doc_id = store.add("officers", {"name": "Ali", "bloodGroup": "O+"})

        store.update("officers", doc_id, {"bloodGroup": "A-"})

        assert store.get("officers", doc_id).data == {"name": "Ali", "bloodGroup": "A-"}

    def test_update_missing_raises(self, store):
        with pytest.raises(DocumentNotFound):
            store.update("officers", "ghost", {"name": "x"})

    def test_set_with_id_replaces_document(self, store):
        store.batch_write([WriteOp("refreshTokens", "set", "u1", {"token": "a", "extra": 1})])
        store.batch_write([WriteOp("refreshTokens", "set", "u1", {"token": "b"})])

        assert store.get("refreshTokens", "u1").data == {"token": "b"}

    def test_delete_missing_is_noop(self, store):
        store.delete("officers", "ghost")

    def test_batch_is_all_or_nothing(self, store):
        keep = store.add("marks", {"marks": 10})

        with pytest.raises(DocumentNotFound):
            store.batch_write([
                WriteOp("marks", "update", keep, {"marks": 20}),
                WriteOp("marks", "set", None, {"marks": 30}),
                WriteOp("marks", "update", "ghost", {"marks": 40}),
            ])

        assert store.get("marks", keep).get("marks") == 10
        assert len(store.query("marks")) == 1

    def test_batch_returns_ids_in_order(self, store):
        existing = store.add("class", {"name": "A"})

        ids = store.batch_write([
            WriteOp("enrollments", "set", None, {"classId": existing}),
            WriteOp("class", "delete", existing),
        ])

        assert ids[1] == existing
        assert store.get("enrollments", ids[0]) is not None
        assert store.get("class", existing) is None
