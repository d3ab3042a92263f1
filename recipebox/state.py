"""Client side state for the recipe box.

The state is an immutable value. Every change goes through :func:`reduce`,
which maps the current state and an :class:`Action` to the next state without
touching the network or any UI toolkit.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .models import Recipe


@dataclass(frozen=True)
class FormData:
    """The four editable fields of the recipe form, all plain strings."""

    title: str = ""
    ingredients: str = ""
    instructions: str = ""
    author: str = ""

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "FormData":
        return cls(
            title=recipe.title,
            ingredients=", ".join(recipe.ingredients),
            instructions=recipe.instructions,
            author=recipe.author,
        )

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(item.name for item in fields(cls))

    def is_complete(self) -> bool:
        return all(getattr(self, name) for name in self.field_names())

    def to_payload(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in self.field_names()}


@dataclass(frozen=True)
class ClientState:
    recipes: Tuple[Recipe, ...] = ()
    form: FormData = field(default_factory=FormData)
    editing_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None


class ActionType(enum.Enum):
    FETCHED = "fetched"
    FIELD_CHANGED = "field_changed"
    SUBMIT_CREATE = "submit_create"
    SUBMIT_UPDATE = "submit_update"
    EDIT_START = "edit_start"
    EDIT_CANCEL = "edit_cancel"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Any = None


def fetched(recipes: Iterable[Recipe]) -> Action:
    return Action(ActionType.FETCHED, tuple(recipes))


def field_changed(name: str, value: str) -> Action:
    return Action(ActionType.FIELD_CHANGED, (name, value))


def submit_create() -> Action:
    return Action(ActionType.SUBMIT_CREATE)


def submit_update() -> Action:
    return Action(ActionType.SUBMIT_UPDATE)


def edit_start(recipe: Recipe) -> Action:
    return Action(ActionType.EDIT_START, recipe)


def edit_cancel() -> Action:
    return Action(ActionType.EDIT_CANCEL)


def deleted(recipe_id: str) -> Action:
    return Action(ActionType.DELETED, recipe_id)


def failed(message: str) -> Action:
    return Action(ActionType.FAILED, message)


def _on_fetched(state: ClientState, recipes: Tuple[Recipe, ...]) -> ClientState:
    return replace(state, recipes=tuple(recipes))


def _on_field_changed(state: ClientState, change: Tuple[str, str]) -> ClientState:
    name, value = change
    if name not in FormData.field_names():
        raise ValueError(f"Unknown form field: {name!r}")
    return replace(state, form=replace(state.form, **{name: value}))


def _on_submit_create(state: ClientState, _: Any) -> ClientState:
    # The author is kept so several recipes can be entered in a row.
    return replace(state, form=FormData(author=state.form.author), error=None)


def _on_submit_update(state: ClientState, _: Any) -> ClientState:
    return replace(state, form=FormData(), editing_id=None, error=None)


def _on_edit_start(state: ClientState, recipe: Recipe) -> ClientState:
    return replace(state, form=FormData.from_recipe(recipe), editing_id=recipe.id, error=None)


def _on_edit_cancel(state: ClientState, _: Any) -> ClientState:
    return replace(state, form=FormData(), editing_id=None, error=None)


def _on_deleted(state: ClientState, recipe_id: str) -> ClientState:
    if state.editing_id == recipe_id:
        return replace(state, form=FormData(), editing_id=None, error=None)
    return replace(state, error=None)


def _on_failed(state: ClientState, message: str) -> ClientState:
    return replace(state, error=message)


_REDUCERS: Dict[ActionType, Callable[[ClientState, Any], ClientState]] = {
    ActionType.FETCHED: _on_fetched,
    ActionType.FIELD_CHANGED: _on_field_changed,
    ActionType.SUBMIT_CREATE: _on_submit_create,
    ActionType.SUBMIT_UPDATE: _on_submit_update,
    ActionType.EDIT_START: _on_edit_start,
    ActionType.EDIT_CANCEL: _on_edit_cancel,
    ActionType.DELETED: _on_deleted,
    ActionType.FAILED: _on_failed,
}


def reduce(state: ClientState, action: Action) -> ClientState:
    """Return the state that follows ``state`` once ``action`` is applied."""

    return _REDUCERS[action.type](state, action.payload)


__all__ = [
    "Action",
    "ActionType",
    "ClientState",
    "FormData",
    "deleted",
    "edit_cancel",
    "edit_start",
    "failed",
    "fetched",
    "field_changed",
    "reduce",
    "submit_create",
    "submit_update",
]
