"""Recipe books: cooking recipes and crafting recipes share one shape."""

from __future__ import annotations

from typing import Any

from .activity import ActivityFeed
from .auth import Actor, Capability, require, require_owner_or
from .errors import DocumentNotFoundError, RecipeNotFoundError, ValidationError
from .models import RECIPE_BOOKS, Ingredient, Recipe, _utc_now
from .store import DocumentStore

# Singular label per book, used in activity messages
BOOK_LABELS = {
    "recipes": "recipe",
    "crafting": "crafting recipe",
}

UPDATABLE_FIELDS = {"name", "description", "location", "ingredients"}


def parse_ingredients(raw: Any) -> list[Ingredient]:
    """Ingredients from form data; rows without a name are dropped."""
    ingredients = []
    for row in raw or []:
        item = row if isinstance(row, Ingredient) else Ingredient.from_dict(row)
        name = item.name.strip()
        if name:
            ingredients.append(Ingredient(name=name, quantity=item.quantity.strip()))
    return ingredients


def _matches(recipe: Recipe, needle: str) -> bool:
    haystack = [recipe.name, recipe.description, recipe.location]
    haystack.extend(i.name for i in recipe.ingredients)
    return any(needle in text.lower() for text in haystack)


class RecipeBookService:
    """
    CRUD over one recipe book.

    Each book is its own collection, so the recipe list and the crafting
    list never mix.
    """

    def __init__(self, store: DocumentStore, feed: ActivityFeed, book: str):
        if book not in RECIPE_BOOKS:
            raise ValueError(f"Unknown recipe book: {book}")
        self.store = store
        self.feed = feed
        self.book = book
        self.label = BOOK_LABELS[book]

    def list(self, search: str | None = None) -> list[Recipe]:
        """List recipes by name, optionally matching name, notes, location or ingredients."""
        recipes = [Recipe.from_dict(d) for d in self.store.list(self.book)]
        recipes.sort(key=lambda r: r.name.lower())
        if search and search.strip():
            needle = search.strip().lower()
            recipes = [r for r in recipes if _matches(r, needle)]
        return recipes

    def get(self, recipe_id: str) -> Recipe:
        try:
            return Recipe.from_dict(self.store.get(self.book, recipe_id))
        except DocumentNotFoundError:
            raise RecipeNotFoundError(recipe_id) from None

    def create(self, data: dict[str, Any], actor: Actor) -> Recipe:
        require(actor, Capability.EDIT_RECORDS)
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("name", "is required")

        now = _utc_now()
        recipe = Recipe(
            id="",
            name=name,
            description=(data.get("description") or "").strip(),
            location=(data.get("location") or "").strip(),
            ingredients=parse_ingredients(data.get("ingredients")),
            created_by=actor.id,
            created_by_name=actor.name,
            created_at=now,
            updated_at=now,
        )
        fields = recipe.to_dict()
        fields.pop("id")
        created = Recipe.from_dict(self.store.insert(self.book, fields))
        self.feed.record(actor, f"Added {self.label}: {name}", self.book, created.id)
        return created

    def update(self, recipe_id: str, changes: dict[str, Any], actor: Actor) -> Recipe:
        """
        Merge changes into a recipe.

        Raises:
            RecipeNotFoundError: If the recipe doesn't exist.
            ValidationError: If a field is unknown or the name is blanked.
            ConcurrentUpdateError: If someone else wrote the recipe meanwhile.
        """
        require(actor, Capability.EDIT_RECORDS)
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError("fields", f"can't update {', '.join(sorted(unknown))}")

        current = self.get(recipe_id)
        fields: dict[str, Any] = {}
        if changes.get("name") is not None:
            fields["name"] = changes["name"].strip()
            if not fields["name"]:
                raise ValidationError("name", "is required")
        for key in ("description", "location"):
            if changes.get(key) is not None:
                fields[key] = changes[key].strip()
        if changes.get("ingredients") is not None:
            fields["ingredients"] = [i.to_dict() for i in parse_ingredients(changes["ingredients"])]
        fields["updated_at"] = _utc_now()

        doc = self.store.update(self.book, recipe_id, fields, expected_version=current.version)
        updated = Recipe.from_dict(doc)
        self.feed.record(actor, f"Updated {self.label}: {updated.name}", self.book, recipe_id)
        return updated

    def delete(self, recipe_id: str, actor: Actor) -> Recipe:
        recipe = self.get(recipe_id)
        require_owner_or(actor, recipe.created_by, Capability.MANAGE_ALL)
        self.store.delete(self.book, recipe_id)
        self.feed.record(actor, f"Deleted {self.label}: {recipe.name}", self.book, recipe_id)
        return recipe
