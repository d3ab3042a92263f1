import logging
import os
from typing import List, Optional, Tuple

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .errors import (
    RecipeNotFoundError,
    RecipeStoreError,
    RecipeValidationError,
    StorageUnavailableError,
)
from .models import Recipe
from .schemas import RecipeInput
from .storage import RecipeRepository

try:
    from .firestore_storage import FirestoreRecipeStorage
except ImportError:  # pragma: no cover - allows running tests without optional deps
    FirestoreRecipeStorage = None  # type: ignore[assignment,misc]

logger = logging.getLogger(__name__)

HTTP_ERROR_KINDS = {400: "validation", 404: "not_found", 503: "unavailable"}


def create_app(storage: Optional[RecipeRepository] = None) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    storage:
        Optional recipe repository. When ``None`` the application will use
        :class:`FirestoreRecipeStorage` configured through environment variables.
    """

    app = Flask(__name__)
    app.config.setdefault("CORS_ORIGINS", _parse_origins(os.environ.get("CORS_ORIGINS", "*")))

    if storage is None:
        if FirestoreRecipeStorage is None:
            raise RuntimeError(
                "google-cloud-firestore is not installed. Install it "
                "or pass an explicit storage backend to create_app."
            )
        storage = FirestoreRecipeStorage.from_env()
    app.config["RECIPE_STORAGE"] = storage

    CORS(app, origins=app.config["CORS_ORIGINS"])

    @app.get("/recipes/", strict_slashes=False)
    def list_recipes() -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        recipes = list(storage_backend.list_recipes())
        return jsonify([recipe.to_dict() for recipe in recipes])

    @app.get("/recipes/<recipe_id>")
    def get_recipe(recipe_id: str) -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        return jsonify(storage_backend.get_recipe(recipe_id).to_dict())

    @app.post("/recipes/add")
    def create_recipe() -> Tuple[Response, int]:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        payload = RecipeInput.from_payload(request.get_json(silent=True))

        new_recipe = storage_backend.add_recipe(
            title=payload.title,
            ingredients_text=payload.ingredients,
            instructions=payload.instructions,
            author=payload.author,
        )
        logger.info("Recipe %s added: %r", new_recipe.id, new_recipe.title)
        return jsonify(message="Recipe added!", recipe=new_recipe.to_dict()), 201

    @app.post("/recipes/update/<recipe_id>")
    def update_recipe(recipe_id: str) -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        payload = RecipeInput.from_payload(request.get_json(silent=True))

        updated_recipe = storage_backend.update_recipe(
            recipe_id,
            title=payload.title,
            ingredients_text=payload.ingredients,
            instructions=payload.instructions,
            author=payload.author,
        )
        logger.info("Recipe %s updated", recipe_id)
        return jsonify(message="Recipe updated!", recipe=updated_recipe.to_dict())

    @app.delete("/recipes/<recipe_id>")
    def delete_recipe(recipe_id: str) -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        storage_backend.delete_recipe(recipe_id)
        logger.info("Recipe %s deleted", recipe_id)
        return jsonify(message="Recipe deleted.")

    @app.errorhandler(RecipeValidationError)
    @app.errorhandler(RecipeNotFoundError)
    @app.errorhandler(StorageUnavailableError)
    @app.errorhandler(RecipeStoreError)
    def handle_recipe_error(exc: Exception) -> Tuple[Response, int]:
        kind = getattr(exc, "kind", "store")
        status_code = getattr(exc, "status_code", 500)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, exc)
        else:
            logger.warning("%s %s rejected (%s): %s", request.method, request.path, kind, exc)
        return jsonify(error=str(exc), kind=kind), status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException) -> Tuple[Response, int]:
        status_code = exc.code or 500
        kind = HTTP_ERROR_KINDS.get(status_code, "http")
        logger.warning("%s %s rejected (%s): %s", request.method, request.path, status_code, exc.description)
        return jsonify(error=exc.description, kind=kind), status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception) -> Tuple[Response, int]:
        logger.exception("%s %s failed unexpectedly", request.method, request.path)
        return jsonify(error=f"Unexpected error: {exc}", kind="store"), 500

    return app


def _parse_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


__all__ = ["create_app", "Recipe"]
