from __future__ import annotations

from typing import Iterable, List, Protocol

from .models import Recipe


def parse_ingredients(ingredients_text: str) -> List[str]:
    """Split a comma separated ingredients string into trimmed items."""

    return [item.strip() for item in ingredients_text.split(",") if item.strip()]


class RecipeRepository(Protocol):
    """Protocol describing the behaviour required by the web layer."""

    def list_recipes(self) -> Iterable[Recipe]:
        """Return an iterable of every stored recipe in store order."""

    def get_recipe(self, recipe_id: str) -> Recipe:
        """Return a single recipe or raise :class:`RecipeNotFoundError` if missing."""

    def add_recipe(
        self,
        *,
        title: str,
        ingredients_text: str,
        instructions: str,
        author: str,
    ) -> Recipe:
        """Persist a new recipe and return the stored instance."""

    def update_recipe(
        self,
        recipe_id: str,
        *,
        title: str,
        ingredients_text: str,
        instructions: str,
        author: str,
    ) -> Recipe:
        """Overwrite every mutable field of a recipe and return the new representation."""

    def delete_recipe(self, recipe_id: str) -> None:
        """Remove a recipe or raise :class:`RecipeNotFoundError` if missing."""


__all__ = ["RecipeRepository", "parse_ingredients"]
