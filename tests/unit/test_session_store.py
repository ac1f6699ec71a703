from gradtrack.core.sessions import ChatSessionStore
from gradtrack.types import ChatTurn


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _turns(count: int) -> list[ChatTurn]:
    return [ChatTurn(role="user" if i % 2 == 0 else "assistant", content=f"m{i}") for i in range(count)]


def test_store_evicts_least_recently_used_session() -> None:
    store = ChatSessionStore(max_sessions=2, ttl_sec=60, max_messages=10, clock=FakeClock())
    store.set("a", _turns(2))
    store.set("b", _turns(2))
    store.get("a")
    store.set("c", _turns(2))

    assert len(store) == 2
    assert "a" in store
    assert "b" not in store
    assert "c" in store


def test_store_drops_expired_sessions_on_access() -> None:
    clock = FakeClock()
    store = ChatSessionStore(max_sessions=5, ttl_sec=60, max_messages=10, clock=clock)
    store.set("a", _turns(2))

    clock.now += 61
    assert store.get("a") == []
    assert "a" not in store


def test_store_trims_history_to_most_recent_messages() -> None:
    store = ChatSessionStore(max_sessions=5, ttl_sec=60, max_messages=3, clock=FakeClock())
    store.set("a", _turns(5))

    history = store.get("a")
    assert [turn.content for turn in history] == ["m2", "m3", "m4"]


def test_store_returns_a_copy_of_history() -> None:
    store = ChatSessionStore(max_sessions=5, ttl_sec=60, max_messages=10, clock=FakeClock())
    store.set("a", _turns(2))

    history = store.get("a")
    history.append(ChatTurn(role="user", content="extra"))
    assert len(store.get("a")) == 2


def test_delete_and_clear() -> None:
    store = ChatSessionStore(max_sessions=5, ttl_sec=60, max_messages=10, clock=FakeClock())
    store.set("a", _turns(1))
    store.set("b", _turns(1))

    store.delete("a")
    store.delete("missing")
    assert "a" not in store and "b" in store

    store.clear()
    assert len(store) == 0
