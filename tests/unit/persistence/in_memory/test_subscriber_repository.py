# -*- coding: utf-8 -*-
"""Unit tests for InMemorySubscriberRepository."""

from __future__ import annotations

import pytest

from pets_tracker.persistence.repositories.in_memory import InMemorySubscriberRepository


async def test_add_remove_contains() -> None:
    repo = InMemorySubscriberRepository()

    assert await repo.add("-100123") is True
    assert await repo.add("-100123") is False
    assert await repo.contains("-100123") is True
    assert repo.count() == 1

    assert await repo.remove("-100123") is True
    assert await repo.remove("-100123") is False
    assert await repo.contains("-100123") is False


async def test_ids_are_normalized_to_strings() -> None:
    repo = InMemorySubscriberRepository()

    await repo.add(42)  # type: ignore[arg-type]

    assert await repo.contains(" 42 ")
    assert await repo.snapshot() == frozenset({"42"})


async def test_snapshot_is_detached_from_later_changes() -> None:
    repo = InMemorySubscriberRepository(initial=["a", "b"])

    snapshot = await repo.snapshot()
    await repo.add("c")
    await repo.remove("a")

    assert snapshot == frozenset({"a", "b"})


async def test_add_rejects_empty_id() -> None:
    with pytest.raises(ValueError):
        await InMemorySubscriberRepository().add("  ")
