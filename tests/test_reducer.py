from tourdesk.app.store.actions import INIT, fetch_actions
from tourdesk.app.store.model import Entity, Meta
from tourdesk.app.store.reducer import ModelState, Page, ResourceActions, create_reducer

LIST = fetch_actions("THINGS", "list")
ITEM = fetch_actions("THINGS", "item")


def _reducer(extra=None):
    return create_reducer(ModelState(), ResourceActions(list=LIST, item=ITEM), extra)


def _ids(state):
    return [item.id for item in state.state.get()]


def test_action_types():
    assert LIST.request.type == "@THINGS/LIST_FETCH_REQUEST"
    assert LIST.success.type == "@THINGS/LIST_FETCH_SUCCESS"
    assert ITEM.failure.type == "@THINGS/ITEM_FETCH_FAILED"


def test_initial_state_is_fetching():
    state = _reducer()(None, INIT())
    assert state.is_fetching is True
    assert len(state.state) == 0


def test_item_success_upserts_and_list_success_replaces():
    reducer = _reducer()
    state = reducer(None, INIT())
    state = reducer(state, LIST.success(Page(data=[Entity(id=1)], meta=Meta(total=1))))
    state = reducer(state, ITEM.success(Entity(id=2)))
    assert _ids(state) == [1, 2]
    assert state.state.total == 1

    state = reducer(state, LIST.success(Page(data=[Entity(id=3)])))
    assert _ids(state) == [3]
    assert state.state.total == 0
    assert state.is_fetching is False


def test_failure_clears_fetching_and_keeps_cache():
    reducer = _reducer()
    state = reducer(None, LIST.success(Page(data=[Entity(id=1)])))
    state = reducer(state, LIST.request())
    assert state.is_fetching is True
    state = reducer(state, LIST.failure(RuntimeError("boom")))
    assert state.is_fetching is False
    assert _ids(state) == [1]


def test_failure_action_is_flagged_as_error():
    assert LIST.failure(RuntimeError("boom")).error is True
    assert LIST.success(Page(data=[])).error is False


def test_stale_list_success_is_dropped():
    reducer = _reducer()
    state = reducer(None, LIST.request(request_id=1))
    state = reducer(state, LIST.request(request_id=2))
    state = reducer(state, LIST.success(Page(data=[Entity(id=2)]), request_id=2))
    dropped = reducer(state, LIST.success(Page(data=[Entity(id=1)]), request_id=1))
    assert dropped is state
    assert _ids(dropped) == [2]
    assert reducer(state, LIST.failure(RuntimeError(), request_id=1)) is state


def test_unfenced_actions_are_last_write_wins():
    reducer = _reducer()
    state = reducer(None, LIST.success(Page(data=[Entity(id=2)])))
    state = reducer(state, LIST.success(Page(data=[Entity(id=1)])))
    assert _ids(state) == [1]


def test_unknown_actions_reach_extra_reducer():
    seen = []

    def extra(state, action):
        seen.append(action.type)
        return state

    reducer = _reducer(extra)
    state = reducer(None, INIT())
    assert reducer(state, ITEM.request()).is_fetching is True
    assert seen == ["@@tourdesk/INIT"]
