from __future__ import annotations

import time
from datetime import datetime, timezone
from urllib.parse import urlsplit

import pytest
import requests

from recipebox.client import (
    IncompleteFormError,
    RecipeApiClient,
    RecipeApiError,
    RecipeBoxSession,
    format_date,
    format_recipe,
    format_recipe_list,
)
from recipebox.models import Recipe
from recipebox.state import ClientState, FormData, edit_start, reduce


class FlaskResponse:
    def __init__(self, response) -> None:
        self._response = response
        self.status_code = response.status_code

    def json(self):
        data = self._response.get_json(silent=True)
        if data is None:
            raise ValueError("Response body is not JSON")
        return data


class FlaskSession:
    """requests-compatible session that routes calls into a Flask test client."""

    def __init__(self, test_client) -> None:
        self.test_client = test_client
        self.calls: list[tuple[str, str]] = []

    def request(self, method, url, timeout=None, json=None):
        path = urlsplit(url).path
        self.calls.append((method, path))
        return FlaskResponse(self.test_client.open(path, method=method, json=json))


class OfflineSession:
    def request(self, method, url, timeout=None, json=None):
        raise requests.ConnectionError("connection refused")


class HtmlResponse:
    status_code = 200

    def json(self):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


class HtmlSession:
    def request(self, method, url, timeout=None, json=None):
        return HtmlResponse()


@pytest.fixture
def flask_session(client):
    return FlaskSession(client)


@pytest.fixture
def api(flask_session):
    return RecipeApiClient("http://recipes.test/recipes", session=flask_session)


@pytest.fixture
def session(api):
    return RecipeBoxSession(api)


def fill_form(session, **values):
    for name, value in values.items():
        session.change_field(name, value)


def test_load_fetches_full_list(session, storage):
    storage.add_recipe(title="Soup", ingredients_text="water", instructions="Boil.", author="Kim")

    state = session.load()

    assert [recipe.title for recipe in state.recipes] == ["Soup"]
    assert isinstance(state.recipes[0].created_at, datetime)


def test_submit_with_empty_field_is_blocked(session, flask_session):
    fill_form(session, title="Soup", ingredients="water", instructions="Boil.")

    with pytest.raises(IncompleteFormError, match="Please fill out all fields"):
        session.submit()

    assert flask_session.calls == []
    assert session.state.form.title == "Soup"


def test_submit_creates_recipe_and_keeps_author(session, flask_session, storage):
    fill_form(session, title="Omelette", ingredients="egg, milk , salt", instructions="Whisk.", author="Sam")

    state = session.submit()

    assert flask_session.calls == [("POST", "/recipes/add"), ("GET", "/recipes/")]
    assert [recipe.ingredients for recipe in state.recipes] == [["egg", "milk", "salt"]]
    assert state.form == FormData(author="Sam")
    assert state.error is None
    assert len(storage.list_recipes()) == 1


def test_edit_then_submit_updates_recipe(session, storage):
    recipe = storage.add_recipe(title="Toast", ingredients_text="bread, butter", instructions="Toast it", author="A")
    session.load()

    state = session.edit(session.state.recipes[0])
    assert state.form.ingredients == "bread, butter"

    session.change_field("title", "Toast v2")
    session.change_field("ingredients", "bread")
    state = session.submit()

    assert state.editing_id is None
    assert state.form == FormData()
    assert state.recipes[0].title == "Toast v2"
    assert storage.get_recipe(recipe.id).ingredients == ["bread"]


def test_cancel_edit_discards_changes(session, storage):
    storage.add_recipe(title="Toast", ingredients_text="bread", instructions="Toast it", author="A")
    session.load()
    session.edit(session.state.recipes[0])
    session.change_field("title", "Burnt toast")

    state = session.cancel_edit()

    assert state.editing_id is None
    assert state.form == FormData()
    assert storage.list_recipes()[0].title == "Toast"


def test_failed_update_keeps_form_and_reports_error(session, storage):
    recipe = storage.add_recipe(title="Toast", ingredients_text="bread", instructions="Toast it", author="A")
    session.load()
    session.edit(session.state.recipes[0])
    storage.delete_recipe(recipe.id)

    state = session.submit()

    assert state.editing_id == recipe.id
    assert state.form.title == "Toast"
    assert len(state.recipes) == 1
    assert "does not exist" in state.error


def test_delete_refetches_list(session, flask_session, storage):
    recipe = storage.add_recipe(title="Toast", ingredients_text="bread", instructions="Toast it", author="A")
    session.load()

    state = session.delete(recipe.id)

    assert flask_session.calls[-2:] == [("DELETE", f"/recipes/{recipe.id}"), ("GET", "/recipes/")]
    assert state.recipes == ()
    assert state.error is None


def test_delete_unknown_recipe_reports_not_found(session):
    state = session.delete("missing")

    assert state.recipes == ()
    assert state.error.startswith("Could not delete recipe")


def test_api_client_raises_with_error_kind(api):
    with pytest.raises(RecipeApiError) as excinfo:
        api.get_recipe("missing")

    assert excinfo.value.status_code == 404
    assert excinfo.value.kind == "not_found"


def test_api_client_add_returns_created_record(api):
    recipe = api.add_recipe(FormData(title="Tea", ingredients="water, tea", instructions="Steep.", author="Lu"))

    assert recipe.id
    assert recipe.ingredients == ["water", "tea"]
    assert api.get_recipe(recipe.id) == recipe


def test_unreachable_api_is_reported_as_unavailable():
    api = RecipeApiClient("http://recipes.test/recipes", session=OfflineSession())

    with pytest.raises(RecipeApiError) as excinfo:
        api.list_recipes()
    assert excinfo.value.kind == "unavailable"

    state = RecipeBoxSession(api, ClientState(form=FormData(title="Kept"))).load()
    assert state.error.startswith("Could not load recipes")
    assert state.form.title == "Kept"


def test_toast_scenario_through_session(session):
    fill_form(session, title="Toast", ingredients="bread, butter", instructions="Toast it", author="A")
    state = session.submit()
    (recipe,) = state.recipes
    assert recipe.ingredients == ["bread", "butter"]

    session.edit(recipe)
    fill_form(session, title="Toast v2", ingredients="bread", instructions="Toast it more")
    state = session.submit()
    (updated,) = state.recipes
    assert updated.title == "Toast v2"
    assert updated.ingredients == ["bread"]
    assert updated.id == recipe.id
    assert updated.created_at == recipe.created_at

    state = session.delete(recipe.id)
    assert state.recipes == ()


def test_format_date_uses_long_form():
    assert format_date(datetime(2026, 10, 9, 8, 15)) == "October 9, 2026"
    assert format_date(None) == ""


def test_format_recipe_lists_ingredients_in_order():
    recipe = Recipe(
        id="r1",
        title="Pancakes",
        ingredients=["flour", "milk", "egg"],
        instructions="Mix and fry.",
        author="Kim",
        created_at=datetime(2024, 5, 4),
    )

    text = format_recipe(recipe)

    assert text.splitlines()[:3] == ["Pancakes", "By: Kim", "May 4, 2024"]
    assert "  • flour\n  • milk\n  • egg" in text
    assert text.endswith("Instructions\nMix and fry.")


def test_non_json_success_body_is_reported_as_api_error():
    api = RecipeApiClient("http://recipes.test/recipes", session=HtmlSession())

    with pytest.raises(RecipeApiError) as excinfo:
        api.list_recipes()
    assert excinfo.value.status_code == 200

    state = RecipeBoxSession(api).load()
    assert state.error.startswith("Could not load recipes")


@pytest.fixture
def new_york_time(monkeypatch):
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_format_date_uses_local_calendar_day(new_york_time):
    late_utc = datetime(2024, 5, 5, 2, 30, tzinfo=timezone.utc)

    assert format_date(late_utc) == "May 4, 2024"


def test_recipe_list_shows_empty_state_and_add_heading():
    text = format_recipe_list(ClientState())

    assert text == "Add a New Recipe\n\nNo recipes added yet. Add one!"


def test_recipe_list_shows_cards_and_update_heading_in_edit_mode():
    recipe = Recipe(id="r1", title="Pancakes", ingredients=["flour"], instructions="Fry.", author="Kim")
    state = reduce(ClientState(recipes=(recipe,), error="Could not delete recipe"), edit_start(recipe))

    text = format_recipe_list(state)

    assert text.startswith("Update Recipe\n\n")
    assert "No recipes added yet" not in text
    assert format_recipe(recipe) in text
    # Entering edit mode clears an earlier error.
    assert "Error:" not in text


def test_recipe_list_reports_error():
    text = format_recipe_list(ClientState(error="Could not load recipes"))

    assert "Error: Could not load recipes" in text
