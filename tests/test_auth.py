import pytest

from tourdesk.app.services.api_client import ApiError
from tourdesk.app.store import auth


def _status(store):
    return auth.selectors(store.get_state()).status


def test_initial_status(store):
    view = auth.selectors(store.get_state())
    assert view.status is auth.AuthUserStatus.DEFAULT
    assert view.user is None
    assert not view.is_authenticated


@pytest.mark.asyncio
async def test_check_auth_without_token_fails(store):
    with pytest.raises(ApiError) as info:
        await store.run(auth.check_auth())
    assert info.value.status_code == 401
    assert _status(store) is auth.AuthUserStatus.UN_AUTHENTICATED


@pytest.mark.asyncio
async def test_login_then_logout(store, mock_api):
    user = await store.run(auth.login({"email": "admin@example.com", "password": "secret"}))
    assert user.email == "admin@example.com"
    assert mock_api.token == "mock-token"
    view = auth.selectors(store.get_state())
    assert view.is_authenticated
    assert view.user.name == "Demo Admin"

    await store.run(auth.logout())
    assert _status(store) is auth.AuthUserStatus.UN_AUTHENTICATED
    assert mock_api.token is None


@pytest.mark.asyncio
async def test_login_with_wrong_password(store):
    with pytest.raises(ApiError) as info:
        await store.run(auth.login({"email": "admin@example.com", "password": "nope"}))
    assert "email" in info.value.formik_errors
    assert _status(store) is auth.AuthUserStatus.UN_AUTHENTICATED


def test_reducer_tracks_request_states():
    state = auth.reducer(None, auth.login_actions.request())
    assert state.status is auth.AuthUserStatus.AUTHENTICATING
    state = auth.reducer(state, auth.check_auth_actions.request())
    assert state.status is auth.AuthUserStatus.CHECKING
