import asyncio

from app.client.debounce import Debouncer, DebouncedInput
from app.client.filter_store import FilterStore, Origin

DELAY = 0.05


async def test_debouncer_runs_last_call_once():
    calls = []
    debounced = Debouncer(calls.append, DELAY)

    for value in ("s", "su", "sui"):
        debounced(value)
        await asyncio.sleep(DELAY / 5)
    assert calls == []
    assert debounced.pending

    await asyncio.sleep(DELAY * 2)
    assert calls == ["sui"]
    assert not debounced.pending


async def test_debouncer_cancel():
    calls = []
    debounced = Debouncer(calls.append, DELAY)
    debounced("x")
    debounced.cancel()
    await asyncio.sleep(DELAY * 2)
    assert calls == []


async def test_typing_commits_once_after_pause():
    store = FilterStore()
    changes = []
    store.subscribe(changes.append)
    name_input = DebouncedInput(store, "name", delay=DELAY)

    for value in ("L", "Lo", "Lof", "Loft"):
        name_input.on_input(value)
        await asyncio.sleep(DELAY / 5)
    assert store.name == ""
    assert name_input.value == "Loft"

    await asyncio.sleep(DELAY * 2)
    assert store.name == "Loft"
    assert [change.origin for change in changes] == [Origin.USER]


async def test_typing_back_to_stored_value_commits_nothing():
    store = FilterStore()
    store.set_filters(name="Loft")
    changes = []
    store.subscribe(changes.append)
    name_input = DebouncedInput(store, "name", delay=DELAY)
    assert name_input.value == "Loft"

    name_input.on_input("Lof")
    name_input.on_input("Loft")
    assert not name_input.pending
    await asyncio.sleep(DELAY * 2)
    assert changes == []


async def test_clear_resets_local_value_and_drops_pending_commit():
    store = FilterStore()
    store.set_filters(name="Loft")
    name_input = DebouncedInput(store, "name", delay=DELAY)

    name_input.on_input("Loft Azul")
    store.clear_filters()
    assert name_input.value == ""
    assert not name_input.pending

    await asyncio.sleep(DELAY * 2)
    assert store.name == ""


async def test_navigation_updates_local_value():
    store = FilterStore()
    name_input = DebouncedInput(store, "name", delay=DELAY)
    store.apply_url_state({"name": "Suíte"})
    assert name_input.value == "Suíte"


async def test_unmount_cancels_pending_commit():
    store = FilterStore()
    name_input = DebouncedInput(store, "name", delay=DELAY)
    name_input.on_input("Loft")
    name_input.cancel()

    await asyncio.sleep(DELAY * 2)
    assert store.name == ""
    # no longer following the store either
    store.set_filters(name="Casa")
    assert name_input.value == "Loft"
