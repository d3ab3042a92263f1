from __future__ import annotations

import contextlib
import logging
import os
from datetime import datetime
from typing import Iterable, Iterator, Optional

from google.api_core import exceptions as gcloud_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore

from .errors import RecipeNotFoundError, RecipeStoreError, StorageUnavailableError
from .models import Recipe
from .storage import RecipeRepository, parse_ingredients

logger = logging.getLogger(__name__)

_UNAVAILABLE_ERRORS = (
    gcloud_exceptions.ServiceUnavailable,
    gcloud_exceptions.DeadlineExceeded,
    gcloud_exceptions.RetryError,
    auth_exceptions.GoogleAuthError,
)


@contextlib.contextmanager
def _translate_errors(operation: str, recipe_id: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except gcloud_exceptions.NotFound as exc:
        if recipe_id is None:
            logger.error("Firestore call failed during %s: %s", operation, exc)
            raise RecipeStoreError(f"Recipe store error: {exc}") from exc
        # The document vanished between the existence check and the write.
        raise RecipeNotFoundError(recipe_id) from exc
    except _UNAVAILABLE_ERRORS as exc:
        logger.error("Firestore unavailable during %s: %s", operation, exc)
        raise StorageUnavailableError(f"Recipe store unavailable: {exc}") from exc
    except gcloud_exceptions.GoogleAPICallError as exc:
        logger.error("Firestore call failed during %s: %s", operation, exc)
        raise RecipeStoreError(f"Recipe store error: {exc}") from exc


class FirestoreRecipeStorage(RecipeRepository):
    """Recipe storage backed by a Firestore collection."""

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        collection_name: str = "recipes",
        client: Optional[firestore.Client] = None,
    ) -> None:
        self._project = project
        self._collection_name = collection_name

        self._firestore_client = client if client is not None else firestore.Client(project=project)
        self._collection = self._firestore_client.collection(collection_name)

    @classmethod
    def from_env(cls) -> "FirestoreRecipeStorage":
        """Build a storage instance from environment variables."""

        project = os.environ.get("GCP_PROJECT")
        collection_name = os.environ.get("RECIPES_COLLECTION", "recipes")
        logger.info("Using Firestore collection '%s' (project: %s)", collection_name, project or "default")
        return cls(project=project, collection_name=collection_name)

    def list_recipes(self) -> Iterable[Recipe]:
        with _translate_errors("list"):
            for doc in self._collection.stream():
                data = doc.to_dict() or {}
                yield self._doc_to_recipe(doc.id, data)

    def get_recipe(self, recipe_id: str) -> Recipe:
        with _translate_errors("get", recipe_id):
            snapshot = self._collection.document(recipe_id).get()

        if not snapshot.exists:
            raise RecipeNotFoundError(recipe_id)

        data = snapshot.to_dict() or {}
        return self._doc_to_recipe(snapshot.id, data)

    def add_recipe(
        self,
        *,
        title: str,
        ingredients_text: str,
        instructions: str,
        author: str,
    ) -> Recipe:
        doc = {
            "title": title,
            "ingredients": parse_ingredients(ingredients_text),
            "instructions": instructions,
            "author": author,
            "created_at": firestore.SERVER_TIMESTAMP,
        }

        with _translate_errors("add"):
            doc_ref = self._collection.document()
            doc_ref.set(doc)
            snapshot = doc_ref.get()

        data = snapshot.to_dict() or {}
        return self._doc_to_recipe(snapshot.id, data)

    def update_recipe(
        self,
        recipe_id: str,
        *,
        title: str,
        ingredients_text: str,
        instructions: str,
        author: str,
    ) -> Recipe:
        update_doc = {
            "title": title,
            "ingredients": parse_ingredients(ingredients_text),
            "instructions": instructions,
            "author": author,
        }

        with _translate_errors("update", recipe_id):
            doc_ref = self._collection.document(recipe_id)
            if not doc_ref.get().exists:
                raise RecipeNotFoundError(recipe_id)

            doc_ref.update(update_doc)
            snapshot = doc_ref.get()

        data = snapshot.to_dict() or {}
        return self._doc_to_recipe(snapshot.id, data)

    def delete_recipe(self, recipe_id: str) -> None:
        with _translate_errors("delete", recipe_id):
            doc_ref = self._collection.document(recipe_id)
            if not doc_ref.get().exists:
                raise RecipeNotFoundError(recipe_id)

            doc_ref.delete()

    def _doc_to_recipe(self, doc_id: str, data: dict) -> Recipe:
        ingredients = data.get("ingredients")
        if isinstance(ingredients, str):
            parsed_ingredients = parse_ingredients(ingredients)
        elif isinstance(ingredients, list):
            parsed_ingredients = ingredients
        else:
            parsed_ingredients = []

        created_at = data.get("created_at")
        if isinstance(created_at, datetime):
            timestamp = created_at
        else:
            timestamp = None

        return Recipe(
            id=doc_id,
            title=data.get("title", ""),
            ingredients=parsed_ingredients,
            instructions=data.get("instructions", ""),
            author=data.get("author", ""),
            created_at=timestamp,
        )


__all__ = ["FirestoreRecipeStorage"]
