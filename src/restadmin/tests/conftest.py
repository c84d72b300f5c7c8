"""Shared pytest fixtures for restadmin tests."""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Mapping
from typing import Any

import pytest

from restadmin.errors import RecordNotFound
from restadmin.runtime.client import EntityPage
from restadmin.specs.application import ApplicationSpec
from restadmin.specs.entity import (
    EditionMode,
    EntitySpec,
    FieldSpec,
    ReferencedListSpec,
    ReferenceManySpec,
    ReferenceSpec,
)


class FakeEntityClient:
    """
    In-memory transport.

    Serves deep copies of ``collections`` so tests can mutate results
    freely, and records every call in ``calls``.
    """

    def __init__(
        self,
        collections: Mapping[str, list[dict[str, Any]]],
        headers: Mapping[str, Mapping[str, str]] | None = None,
        failures: Mapping[str, Exception] | None = None,
    ):
        self.collections = dict(collections)
        self.headers = dict(headers or {})
        self.failures = dict(failures or {})
        self.calls: list[tuple[str, str, Any]] = []

    async def fetch_page(self, entity_name, params, interceptor=None):
        self.calls.append(("fetch_page", entity_name, dict(params)))
        await asyncio.sleep(0)
        if entity_name in self.failures:
            raise self.failures[entity_name]
        data: Any = copy.deepcopy(self.collections.get(entity_name, []))
        if interceptor:
            data = interceptor(data, "getList", entity_name)
        return EntityPage(records=data, headers=dict(self.headers.get(entity_name, {})))

    async def fetch_one(self, entity_name, entity_id, params, interceptor=None):
        self.calls.append(("fetch_one", entity_name, entity_id))
        for record in self.collections.get(entity_name, []):
            if str(record.get("id")) == str(entity_id):
                data = copy.deepcopy(record)
                if interceptor:
                    data = interceptor(data, "get", entity_name)
                return data
        raise RecordNotFound(entity_name, f"No {entity_name} {entity_id}", status_code=404)

    async def create(self, entity_name, record):
        self.calls.append(("create", entity_name, dict(record)))
        created = {"id": len(self.collections.get(entity_name, [])) + 1, **record}
        self.collections.setdefault(entity_name, []).append(created)
        return dict(created)

    async def update(self, entity_name, entity_id, record):
        self.calls.append(("update", entity_name, entity_id))
        return dict(record)

    async def delete(self, entity_name, entity_id):
        self.calls.append(("delete", entity_name, entity_id))

    def calls_for(self, entity_name: str) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[1] == entity_name]


# =============================================================================
# Specs
# =============================================================================


@pytest.fixture
def owner_entity() -> EntitySpec:
    return EntitySpec(
        name="owners",
        label="Owners",
        fields=[
            FieldSpec(name="id", edition=EditionMode.READ_ONLY),
            FieldSpec(name="name"),
        ],
    )


@pytest.fixture
def tag_entity() -> EntitySpec:
    return EntitySpec(
        name="tags",
        fields=[FieldSpec(name="id", edition=None), FieldSpec(name="label")],
    )


@pytest.fixture
def toy_entity() -> EntitySpec:
    return EntitySpec(
        name="toys",
        fields=[
            FieldSpec(name="id", edition=None),
            FieldSpec(name="name"),
            FieldSpec(name="cat_id", edition=EditionMode.NONE),
        ],
    )


@pytest.fixture
def cat_entity() -> EntitySpec:
    return EntitySpec(
        name="cats",
        label="Cats",
        per_page=10,
        fields=[
            FieldSpec(name="id", edition=EditionMode.READ_ONLY),
            FieldSpec(name="name", value_transformer="upper"),
            FieldSpec(name="birth_date", value_transformer="date"),
            ReferenceSpec(name="owner_id", target_entity="owners", target_label="name"),
            ReferenceManySpec(name="tag_ids", target_entity="tags", target_label="label"),
            ReferencedListSpec(
                name="toys",
                target_entity="toys",
                target_field="cat_id",
                target_fields=["id", "name"],
            ),
        ],
    )


@pytest.fixture
def app_spec(cat_entity, owner_entity, tag_entity, toy_entity) -> ApplicationSpec:
    return ApplicationSpec(
        name="shelter",
        base_api_url="http://api.test",
        entities=[cat_entity, owner_entity, tag_entity, toy_entity],
    )


# =============================================================================
# Data
# =============================================================================


@pytest.fixture
def collections() -> dict[str, list[dict[str, Any]]]:
    return {
        "cats": [
            {"id": 1, "name": "Mizu", "birth_date": "2019-04-02", "owner_id": 7, "tag_ids": [1, 2]},
            {"id": 2, "name": "Tom", "birth_date": None, "owner_id": "8", "tag_ids": [2, 99]},
            {"id": 3, "name": "Stray", "owner_id": 99, "tag_ids": []},
            {"id": 4, "name": "Nobody", "owner_id": None},
        ],
        "owners": [
            {"id": 7, "name": "Alice"},
            {"id": 8, "name": "Bob"},
        ],
        "tags": [
            {"id": 1, "label": "fluffy"},
            {"id": 2, "label": "grumpy"},
        ],
        "toys": [
            {"id": 10, "name": "Mouse", "cat_id": 1},
            {"id": 11, "name": "Ball", "cat_id": "1"},
            {"id": 12, "name": "Yarn", "cat_id": 2},
        ],
    }


@pytest.fixture
def fake_client(collections) -> FakeEntityClient:
    return FakeEntityClient(collections, headers={"cats": {"X-Total-Count": "42"}})


@pytest.fixture
def make_client(collections):
    """Factory for fake clients with custom headers or failures."""

    def factory(**kwargs: Any) -> FakeEntityClient:
        return FakeEntityClient(kwargs.pop("collections", collections), **kwargs)

    return factory
