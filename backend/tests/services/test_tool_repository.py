"""SQL Tool Repository — persistence of ToolDocuments keyed by name.

Invariants:
    - put() inserts, or overwrites an existing tool with the same name
    - put(replaces=old) removes the old key
    - rename() moves content to the new key; unknown source is 404
    - Stored rows always carry executionSpecs
"""

import pytest

from app.core.domain_types import PropertyKind
from app.core.errors import DatabaseError, ResourceNotFoundError
from app.core.parameter_tree import ParameterTree, PropertyDefinition
from app.core.tool_document import ExecutionPolicy, ToolDocument
from app.models.client_tool import ClientTool


def _document(name="get_weather", description="Weather", retries=1):
    tree = ParameterTree()
    tree.add_or_update_property("city", PropertyDefinition(kind=PropertyKind.STRING))
    return ToolDocument(
        name=name, description=description, tree=tree,
        execution_policy=ExecutionPolicy(max_retry_attempts=retries),
    )


async def test_put_then_get(repository):
    await repository.put(_document(retries=4))
    document = await repository.get("get_weather")
    assert document.description == "Weather"
    assert list(document.tree.properties) == ["city"]
    assert document.execution_policy.max_retry_attempts == 4


async def test_get_missing_returns_none(repository):
    assert await repository.get("nothing_here") is None


async def test_put_overwrites_same_name(repository):
    await repository.put(_document(description="First"))
    await repository.put(_document(description="Second"))
    tools = await repository.list_all()
    assert [t.description for t in tools] == ["Second"]


async def test_put_with_replaces_removes_old_key(repository):
    await repository.put(_document(name="old_name"))
    await repository.put(_document(name="new_name"), replaces="old_name")
    assert await repository.get("old_name") is None
    assert await repository.get("new_name") is not None


async def test_list_all_ordered_by_name(repository):
    await repository.put(_document(name="zeta_tool"))
    await repository.put(_document(name="alpha_tool"))
    assert [t.name for t in await repository.list_all()] == ["alpha_tool", "zeta_tool"]


async def test_rename_moves_document(repository):
    await repository.put(_document(name="old_name", retries=2))
    await repository.rename("old_name", "new_name")
    assert await repository.get("old_name") is None
    renamed = await repository.get("new_name")
    assert renamed.name == "new_name"
    assert renamed.execution_policy.max_retry_attempts == 2


async def test_rename_to_same_name_is_noop(repository):
    await repository.put(_document())
    await repository.rename("get_weather", "get_weather")
    assert await repository.get("get_weather") is not None


async def test_rename_missing_raises(repository):
    with pytest.raises(ResourceNotFoundError):
        await repository.rename("ghost_tool", "new_name")


async def test_delete(repository):
    await repository.put(_document())
    assert await repository.delete("get_weather") is True
    assert await repository.delete("get_weather") is False


async def test_stored_row_carries_execution_specs(repository, test_db):
    await repository.put(_document())
    row = await test_db.get(ClientTool, "get_weather")
    assert row.document["executionSpecs"]["type"] == "client_side"
    assert "execution_specs" in row.document["parameters"]["properties"]
    assert row.document["name"] == row.name


async def test_corrupt_stored_document_is_database_error(repository, test_db):
    test_db.add(ClientTool(name="broken", description="x", document={"name": "broken"}))
    await test_db.commit()
    with pytest.raises(DatabaseError):
        await repository.get("broken")
