"""Action objects and creators for the client store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Action:
    """A state transition request handed to the reducers."""

    type: str
    payload: Any = None
    meta: Dict[str, Any] = field(default_factory=dict)
    error: bool = False


@dataclass(frozen=True)
class ActionCreator:
    """Factory for actions of a single type."""

    type: str

    def __call__(self, payload: Any = None, **meta: Any) -> Action:
        return Action(
            type=self.type,
            payload=payload,
            meta=meta,
            error=isinstance(payload, BaseException),
        )

    def matches(self, action: Action) -> bool:
        return action.type == self.type


@dataclass(frozen=True)
class AsyncAction:
    """Request/success/failure triple around one HTTP call."""

    request: ActionCreator
    success: ActionCreator
    failure: ActionCreator


def create_action(action_type: str) -> ActionCreator:
    return ActionCreator(action_type)


def create_async_action(
    request_type: str, success_type: str, failure_type: str
) -> AsyncAction:
    return AsyncAction(
        request=ActionCreator(request_type),
        success=ActionCreator(success_type),
        failure=ActionCreator(failure_type),
    )


def fetch_actions(prefix: str, capability: str) -> AsyncAction:
    """Build ``@PREFIX/CAPABILITY_FETCH_{REQUEST,SUCCESS,FAILED}`` actions."""
    base = f"@{prefix}/{capability.upper()}_FETCH"
    return create_async_action(f"{base}_REQUEST", f"{base}_SUCCESS", f"{base}_FAILED")


INIT = create_action("@@tourdesk/INIT")
