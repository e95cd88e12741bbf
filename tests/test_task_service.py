"""TaskService tests — caching observed at the SQL level.

Learn: A before_cursor_execute listener counts statements, which lets
these tests assert "served from cache" as "no second SELECT".
"""

import pytest
from sqlalchemy import event

from taskmanager.cache import ResponseCache, task_key, task_list_key
from taskmanager.errors import NotFound
from taskmanager.services.task_service import TaskService


@pytest.fixture
def cache():
    return ResponseCache()


@pytest.fixture
def statements(engine):
    """Collect every SQL statement the engine executes."""
    seen: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        seen.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", _record)
    yield seen
    event.remove(engine.sync_engine, "before_cursor_execute", _record)


def _selects(statements: list[str]) -> list[str]:
    return [s for s in statements if s.lstrip().upper().startswith("SELECT")]


@pytest.mark.asyncio
async def test_get_task_twice_hits_database_once(db_session, cache, statements):
    svc = TaskService(db_session, cache, owner="a@example.com")
    task = await svc.add_task("cache me", "body", False)
    statements.clear()

    first = await svc.get_task(task.id)
    second = await svc.get_task(task.id)

    assert first == second
    assert len(_selects(statements)) == 1


@pytest.mark.asyncio
async def test_list_tasks_twice_hits_database_once(db_session, cache, statements):
    svc = TaskService(db_session, cache, owner="a@example.com")
    await svc.add_task("one")
    await svc.add_task("two")
    statements.clear()

    first = await svc.list_tasks()
    second = await svc.list_tasks()

    assert [t["title"] for t in first] == ["one", "two"]
    assert first == second
    assert len(_selects(statements)) == 1


@pytest.mark.asyncio
async def test_cached_payload_is_not_shared_with_callers(db_session, cache):
    svc = TaskService(db_session, cache, owner="a@example.com")
    task = await svc.add_task("immutable")

    data = await svc.get_task(task.id)
    data["title"] = "mutated by caller"

    assert (await svc.get_task(task.id))["title"] == "immutable"


@pytest.mark.asyncio
async def test_get_task_of_other_owner_is_not_found(db_session, cache):
    alice = TaskService(db_session, cache, owner="alice@example.com")
    bob = TaskService(db_session, cache, owner="bob@example.com")
    task_id = (await alice.add_task("private")).id
    await alice.get_task(task_id)  # warm alice's cache entry

    with pytest.raises(NotFound):
        await bob.get_task(task_id)
    with pytest.raises(NotFound):
        await bob.update_task(task_id, "x")
    with pytest.raises(NotFound):
        await bob.delete_task(task_id)
    assert cache.contains(task_key("alice@example.com", task_id))
    assert (await alice.get_task(task_id))["title"] == "private"


@pytest.mark.asyncio
async def test_not_found_is_not_cached(db_session, cache):
    svc = TaskService(db_session, cache, owner="a@example.com")
    with pytest.raises(NotFound):
        await svc.get_task(12345)
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_update_invalidates_list_and_task_keys(db_session, cache):
    svc = TaskService(db_session, cache, owner="a@example.com")
    task = await svc.add_task("before")
    await svc.list_tasks()
    await svc.get_task(task.id)

    await svc.update_task(task.id, "after", "", True)

    assert not cache.contains(task_list_key("a@example.com"))
    assert not cache.contains(task_key("a@example.com", task.id))
    refreshed = await svc.get_task(task.id)
    assert refreshed["title"] == "after"
    assert refreshed["completed"] is True


@pytest.mark.asyncio
async def test_failed_mutation_leaves_cache_alone(db_session, cache):
    svc = TaskService(db_session, cache, owner="a@example.com")
    await svc.add_task("kept")
    await svc.list_tasks()

    with pytest.raises(NotFound):
        await svc.delete_task(999)

    assert cache.contains(task_list_key("a@example.com"))


@pytest.mark.asyncio
async def test_write_during_read_does_not_leave_stale_entry(db_session, cache):
    """A read that started before an invalidation must not repopulate."""
    svc = TaskService(db_session, cache, owner="a@example.com")
    task = await svc.add_task("v1")
    key = task_key("a@example.com", task.id)

    # Simulate the interleaving: reader snapshots the generation, then a
    # writer invalidates before the reader stores its result.
    generation = cache.generation()
    await svc.update_task(task.id, "v2")
    stored = cache.set_if_current(key, {"id": task.id, "title": "v1"}, generation)

    assert stored is False
    assert (await svc.get_task(task.id))["title"] == "v2"


@pytest.mark.asyncio
async def test_out_of_range_id_never_reaches_database(db_session, cache, statements):
    svc = TaskService(db_session, cache, owner="a@example.com")
    huge = 10**20

    with pytest.raises(NotFound):
        await svc.get_task(huge)
    with pytest.raises(NotFound):
        await svc.update_task(huge, "x")
    with pytest.raises(NotFound):
        await svc.delete_task(huge)

    assert statements == []
