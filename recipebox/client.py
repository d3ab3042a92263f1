from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, List, Optional

import requests

from . import state as actions
from .models import Recipe
from .state import ClientState, FormData

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/recipes"
DEFAULT_TIMEOUT = 10.0


class RecipeApiError(Exception):
    """Raised when the recipe API answers with an error or cannot be reached."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, kind: str = "unknown") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.kind = kind


class IncompleteFormError(ValueError):
    """Raised when the form is submitted with an empty field."""


class RecipeApiClient:
    """Thin wrapper around the four recipe endpoints (plus fetch-by-id)."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "RecipeApiClient":
        """Build a client from environment variables."""

        base_url = os.environ.get("RECIPE_API_URL", DEFAULT_API_URL)
        timeout = float(os.environ.get("RECIPE_API_TIMEOUT", DEFAULT_TIMEOUT))
        return cls(base_url, timeout=timeout)

    def list_recipes(self) -> List[Recipe]:
        data = self._request("GET", f"{self.base_url}/")
        return [Recipe.from_dict(item) for item in data]

    def get_recipe(self, recipe_id: str) -> Recipe:
        return Recipe.from_dict(self._request("GET", f"{self.base_url}/{recipe_id}"))

    def add_recipe(self, form: FormData) -> Recipe:
        data = self._request("POST", f"{self.base_url}/add", json=form.to_payload())
        return Recipe.from_dict(data["recipe"])

    def update_recipe(self, recipe_id: str, form: FormData) -> Recipe:
        data = self._request("POST", f"{self.base_url}/update/{recipe_id}", json=form.to_payload())
        return Recipe.from_dict(data["recipe"])

    def delete_recipe(self, recipe_id: str) -> None:
        self._request("DELETE", f"{self.base_url}/{recipe_id}")

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise RecipeApiError(f"Recipe API unreachable: {exc}", kind="unavailable") from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise RecipeApiError(
                body.get("error") or f"{method} {url} failed with status {response.status_code}",
                status_code=response.status_code,
                kind=body.get("kind", "unknown"),
            )

        try:
            return response.json()
        except ValueError as exc:
            raise RecipeApiError(
                f"{method} {url} returned a body that is not JSON",
                status_code=response.status_code,
            ) from exc


class RecipeBoxSession:
    """Keeps a :class:`ClientState` in sync with the recipe API.

    Every mutation is followed by a full re-fetch of the list. Failures are
    logged and recorded on ``state.error``; the form and list are left as they
    were so the user can retry.
    """

    def __init__(self, api: RecipeApiClient, initial_state: Optional[ClientState] = None) -> None:
        self.api = api
        self.state = initial_state if initial_state is not None else ClientState()

    def dispatch(self, action: actions.Action) -> ClientState:
        self.state = actions.reduce(self.state, action)
        return self.state

    def load(self) -> ClientState:
        try:
            recipes = self.api.list_recipes()
        except RecipeApiError as exc:
            logger.error("Error fetching recipes: %s", exc)
            return self.dispatch(actions.failed(f"Could not load recipes: {exc}"))
        return self.dispatch(actions.fetched(recipes))

    def change_field(self, name: str, value: str) -> ClientState:
        return self.dispatch(actions.field_changed(name, value))

    def submit(self) -> ClientState:
        form = self.state.form
        if not form.is_complete():
            raise IncompleteFormError("Please fill out all fields")

        if self.state.editing_id is not None:
            try:
                self.api.update_recipe(self.state.editing_id, form)
            except RecipeApiError as exc:
                logger.error("Error updating recipe: %s", exc)
                return self.dispatch(actions.failed(f"Could not update recipe: {exc}"))
            self.dispatch(actions.submit_update())
            return self.load()

        try:
            self.api.add_recipe(form)
        except RecipeApiError as exc:
            logger.error("Error adding recipe: %s", exc)
            return self.dispatch(actions.failed(f"Could not add recipe: {exc}"))
        self.dispatch(actions.submit_create())
        return self.load()

    def edit(self, recipe: Recipe) -> ClientState:
        return self.dispatch(actions.edit_start(recipe))

    def cancel_edit(self) -> ClientState:
        return self.dispatch(actions.edit_cancel())

    def delete(self, recipe_id: str) -> ClientState:
        try:
            self.api.delete_recipe(recipe_id)
        except RecipeApiError as exc:
            logger.error("Error deleting recipe: %s", exc)
            self.dispatch(actions.failed(f"Could not delete recipe: {exc}"))
        else:
            self.dispatch(actions.deleted(recipe_id))
        return self.load()


def format_date(created_at: Optional[datetime]) -> str:
    if created_at is None:
        return ""
    local = created_at.astimezone()
    return f"{local:%B} {local.day}, {local.year}"


def format_recipe(recipe: Recipe) -> str:
    """Render a recipe card as plain text."""

    lines = [recipe.title, f"By: {recipe.author}"]
    date = format_date(recipe.created_at)
    if date:
        lines.append(date)
    lines.append("")
    lines.append("Ingredients")
    lines.extend(f"  • {ingredient}" for ingredient in recipe.ingredients)
    lines.append("")
    lines.append("Instructions")
    lines.append(recipe.instructions)
    return "\n".join(lines)


def format_recipe_list(state: ClientState) -> str:
    """Render the form heading followed by every recipe card."""

    heading = "Update Recipe" if state.is_editing else "Add a New Recipe"
    sections = [heading]
    if state.error:
        sections.append(f"Error: {state.error}")
    if not state.recipes:
        sections.append("No recipes added yet. Add one!")
    else:
        sections.extend(format_recipe(recipe) for recipe in state.recipes)
    return "\n\n".join(sections)


__all__ = [
    "IncompleteFormError",
    "RecipeApiClient",
    "RecipeApiError",
    "RecipeBoxSession",
    "format_date",
    "format_recipe",
    "format_recipe_list",
]
