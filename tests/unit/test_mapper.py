"""Tests for document identity derivation."""

import hashlib

import pytest

from github_river.mapper import canonical_json, compute_content_hash, map_element
from github_river.resources import ResourceKind


class TestNaturalId:
    def test_numeric_id_kept(self):
        mapped = map_element(ResourceKind.ISSUE, {"id": 42, "title": "Broken"})
        assert mapped.id == "42"
        assert mapped.doc_type == "issue"
        assert mapped.overwrite is True

    def test_string_id_kept(self):
        mapped = map_element(ResourceKind.EVENT, {"id": "1234567890", "type": "PushEvent"})
        assert mapped.id == "1234567890"
        assert mapped.doc_type == "event"

    @pytest.mark.parametrize("kind", [
        ResourceKind.PULL_REQUEST,
        ResourceKind.MILESTONE,
        ResourceKind.LABEL,
        ResourceKind.COLLABORATOR,
    ])
    def test_volatile_kinds_are_create_only(self, kind):
        assert map_element(kind, {"id": 1}).overwrite is False


class TestContentHash:
    def test_missing_id_uses_md5_of_canonical_json(self):
        label = {"name": "bug", "color": "f29513"}
        mapped = map_element(ResourceKind.LABEL, label)
        expected = hashlib.md5(b'{"color":"f29513","name":"bug"}').hexdigest()
        assert mapped.id == expected
        assert len(mapped.id) == 32

    def test_null_id_uses_hash(self):
        mapped = map_element(ResourceKind.LABEL, {"id": None, "name": "bug"})
        assert mapped.id == compute_content_hash({"id": None, "name": "bug"})

    def test_key_order_does_not_matter(self):
        a = {"name": "bug", "color": "f29513"}
        b = {"color": "f29513", "name": "bug"}
        assert compute_content_hash(a) == compute_content_hash(b)

    def test_changed_property_changes_id(self):
        before = map_element(ResourceKind.LABEL, {"name": "bug", "color": "f29513"})
        after = map_element(ResourceKind.LABEL, {"name": "bug", "color": "000000"})
        assert before.id != after.id

    def test_non_object_element_is_hashed(self):
        mapped = map_element(ResourceKind.LABEL, "bug")
        assert mapped.id == compute_content_hash("bug")

    def test_canonical_json_keeps_unicode(self):
        assert canonical_json({"name": "défaut"}) == '{"name":"défaut"}'


class TestResourceKind:
    def test_durable_kinds(self):
        assert ResourceKind.EVENT.overwrite and not ResourceKind.EVENT.volatile
        assert ResourceKind.ISSUE.overwrite and not ResourceKind.ISSUE.volatile

    def test_volatile_kinds(self):
        for kind in (ResourceKind.PULL_REQUEST, ResourceKind.LABEL):
            assert kind.volatile and not kind.overwrite
