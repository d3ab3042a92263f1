from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from recipebox import create_app
from recipebox.errors import RecipeNotFoundError
from recipebox.models import Recipe
from recipebox.storage import parse_ingredients


class InMemoryRecipeStorage:
    """Simple storage backend used for tests."""

    def __init__(self) -> None:
        self._recipes: list[Recipe] = []
        self._clock = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def list_recipes(self):
        return list(self._recipes)

    def get_recipe(self, recipe_id: str) -> Recipe:
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                return recipe
        raise RecipeNotFoundError(recipe_id)

    def add_recipe(
        self,
        *,
        title: str,
        ingredients_text: str,
        instructions: str,
        author: str,
    ) -> Recipe:
        self._clock += timedelta(minutes=1)
        recipe = Recipe(
            id=uuid.uuid4().hex,
            title=title,
            ingredients=parse_ingredients(ingredients_text),
            instructions=instructions,
            author=author,
            created_at=self._clock,
        )
        self._recipes.append(recipe)
        return recipe

    def update_recipe(
        self,
        recipe_id: str,
        *,
        title: str,
        ingredients_text: str,
        instructions: str,
        author: str,
    ) -> Recipe:
        recipe = self.get_recipe(recipe_id)
        recipe.title = title
        recipe.ingredients = parse_ingredients(ingredients_text)
        recipe.instructions = instructions
        recipe.author = author
        return recipe

    def delete_recipe(self, recipe_id: str) -> None:
        for index, recipe in enumerate(self._recipes):
            if recipe.id == recipe_id:
                self._recipes.pop(index)
                return
        raise RecipeNotFoundError(recipe_id)


@pytest.fixture
def storage() -> InMemoryRecipeStorage:
    return InMemoryRecipeStorage()


@pytest.fixture
def app(storage):
    app = create_app(storage=storage)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
