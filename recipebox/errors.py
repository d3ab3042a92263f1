"""Error taxonomy shared by the recipe store and the HTTP API."""


class RecipeStoreError(Exception):
    """Base class for failures raised by a recipe repository."""

    kind = "store"
    status_code = 500


class RecipeNotFoundError(RecipeStoreError, KeyError):
    """Raised when no recipe exists for the requested identifier."""

    kind = "not_found"
    status_code = 404

    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"Recipe '{recipe_id}' does not exist.")
        self.recipe_id = recipe_id

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise.
        return str(self.args[0])


class StorageUnavailableError(RecipeStoreError):
    """Raised when the backing document store cannot be reached."""

    kind = "unavailable"
    status_code = 503


class RecipeValidationError(ValueError):
    """Raised when a request payload does not describe a recipe."""

    kind = "validation"
    status_code = 400


__all__ = [
    "RecipeNotFoundError",
    "RecipeStoreError",
    "RecipeValidationError",
    "StorageUnavailableError",
]
