"""Authenticated user state and session thunks."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional

from loguru import logger
from pydantic import BaseModel

from tourdesk.app.store.actions import Action, create_async_action
from tourdesk.app.store.core import RootState, Store, Thunk

KEY = "AUTHENTICATED_USER_STATE"


class AuthUserStatus(str, Enum):
    DEFAULT = "DEFAULT"
    CHECKING = "CHECKING"
    UN_AUTHENTICATED = "UN_AUTHENTICATED"
    AUTHENTICATING = "AUTHENTICATING"
    AUTHENTICATED = "AUTHENTICATED"


class AuthUser(BaseModel):
    id: int
    name: str
    email: str


@dataclass(frozen=True)
class AuthState:
    status: AuthUserStatus = AuthUserStatus.DEFAULT
    data: Optional[AuthUser] = None


@dataclass(frozen=True)
class AuthView:
    status: AuthUserStatus
    user: Optional[AuthUser]

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthUserStatus.AUTHENTICATED


check_auth_actions = create_async_action(
    "@AUTH/CHECK_AUTH_REQUEST", "@AUTH/CHECK_AUTH_SUCCESS", "@AUTH/CHECK_AUTH_FAILED"
)
login_actions = create_async_action(
    "@AUTH/LOGIN_REQUEST", "@AUTH/LOGIN_SUCCESS", "@AUTH/LOGIN_FAILED"
)
logout_actions = create_async_action(
    "@AUTH/LOGOUT_REQUEST", "@AUTH/LOGOUT_SUCCESS", "@AUTH/LOGOUT_FAILED"
)


def reducer(state: Optional[AuthState], action: Action) -> AuthState:
    current = AuthState() if state is None else state
    if check_auth_actions.request.matches(action):
        return replace(current, status=AuthUserStatus.CHECKING)
    if login_actions.request.matches(action):
        return replace(current, status=AuthUserStatus.AUTHENTICATING)
    if check_auth_actions.success.matches(action) or login_actions.success.matches(action):
        return AuthState(status=AuthUserStatus.AUTHENTICATED, data=action.payload)
    if (
        check_auth_actions.failure.matches(action)
        or login_actions.failure.matches(action)
        or logout_actions.success.matches(action)
    ):
        return AuthState(status=AuthUserStatus.UN_AUTHENTICATED)
    return current


def selectors(root: RootState) -> AuthView:
    my_state: AuthState = root[KEY]
    return AuthView(status=my_state.status, user=my_state.data)


def check_auth() -> Thunk[AuthUser]:
    async def thunk(store: Store) -> AuthUser:
        store.dispatch(check_auth_actions.request())
        try:
            user = AuthUser.model_validate(await store.client.get_current_user())
        except Exception as exc:
            store.dispatch(check_auth_actions.failure(exc))
            raise
        store.dispatch(check_auth_actions.success(user))
        return user

    return thunk


def login(credentials: Mapping[str, Any]) -> Thunk[AuthUser]:
    async def thunk(store: Store) -> AuthUser:
        store.dispatch(login_actions.request())
        try:
            await store.client.login(credentials)
            user = AuthUser.model_validate(await store.client.get_current_user())
        except Exception as exc:
            logger.warning("Login failed for {email}", email=credentials.get("email"))
            store.dispatch(login_actions.failure(exc))
            raise
        store.dispatch(login_actions.success(user))
        logger.info("Logged in as {email}", email=user.email)
        return user

    return thunk


def logout() -> Thunk[None]:
    async def thunk(store: Store) -> None:
        store.dispatch(logout_actions.request())
        try:
            await store.client.logout()
        except Exception as exc:
            store.dispatch(logout_actions.failure(exc))
            raise
        store.dispatch(logout_actions.success())

    return thunk
