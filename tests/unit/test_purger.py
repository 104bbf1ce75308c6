"""Tests for StaleKindPurger."""

import pytest

from github_river.bulk import BulkWriter
from github_river.purger import StaleKindPurger
from github_river.resources import VOLATILE_KINDS, ResourceKind


async def _seed(store, kind, count, repository="widgets"):
    writer = BulkWriter(store, kind, repository=repository, owner="acme")
    for i in range(count):
        writer.add({"id": f"{repository}-{i}", "repo": repository})
    await writer.flush()


@pytest.mark.asyncio
async def test_purge_removes_kind_across_repositories(store):
    await _seed(store, ResourceKind.LABEL, 2, "widgets")
    await _seed(store, ResourceKind.LABEL, 3, "gadgets")
    await _seed(store, ResourceKind.ISSUE, 1)

    result = await StaleKindPurger(store).purge(ResourceKind.LABEL)

    assert result.ok
    assert result.deleted == 5
    assert store.count("label") == 0
    assert store.count("issue") == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", [ResourceKind.EVENT, ResourceKind.ISSUE])
async def test_durable_kinds_refused(store, kind):
    with pytest.raises(ValueError):
        await StaleKindPurger(store).purge(kind)


@pytest.mark.asyncio
async def test_purge_volatile_order_and_durables_survive(store, qdrant):
    for kind in ResourceKind:
        await _seed(store, kind, 1)

    results = await StaleKindPurger(store).purge_volatile()

    assert [r.kind for r in results] == list(VOLATILE_KINDS)
    assert all(r.deleted == 1 for r in results)
    assert store.count() == 2
    assert store.count("event") == 1
    assert store.count("issue") == 1


@pytest.mark.asyncio
async def test_store_failure_reported_not_raised(store, qdrant):
    qdrant.failures["delete"] = ConnectionError("down")

    result = await StaleKindPurger(store).purge(ResourceKind.MILESTONE)

    assert not result.ok
    assert "down" in result.error
