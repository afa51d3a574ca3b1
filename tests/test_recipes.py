"""Tests for the recipe books."""

import pytest

from ranchhand.errors import (
    ConcurrentUpdateError,
    PermissionDeniedError,
    RecipeNotFoundError,
    ValidationError,
)
from ranchhand.recipes import RecipeBookService


@pytest.fixture
def health_cure(ranch, member):
    return ranch.recipes.create(
        {
            "name": "Potent Health Cure",
            "location": "Campfire",
            "ingredients": [
                {"name": "Ginseng", "quantity": "2"},
                {"name": "  ", "quantity": "9"},
                {"name": "Yarrow", "quantity": ""},
            ],
        },
        member,
    )


class TestRecipeBook:
    def test_create_drops_blank_ingredients(self, health_cure):
        assert health_cure.name == "Potent Health Cure"
        assert [(i.name, i.quantity) for i in health_cure.ingredients] == [
            ("Ginseng", "2"),
            ("Yarrow", ""),
        ]
        assert health_cure.created_by_name == "Sadie"

    def test_name_required(self, ranch, member):
        with pytest.raises(ValidationError):
            ranch.recipes.create({"name": ""}, member)

    def test_books_are_separate(self, ranch, member, health_cure):
        ranch.crafting.create({"name": "Lasso", "location": "Wilderness Camp"}, member)
        assert [r.name for r in ranch.recipes.list()] == ["Potent Health Cure"]
        assert [r.name for r in ranch.crafting.list()] == ["Lasso"]

    def test_search_matches_ingredients_and_location(self, ranch, member, health_cure):
        ranch.recipes.create({"name": "Bread", "ingredients": [{"name": "Flour"}]}, member)
        assert [r.name for r in ranch.recipes.list(search="yarrow")] == ["Potent Health Cure"]
        assert [r.name for r in ranch.recipes.list(search="CAMPFIRE")] == ["Potent Health Cure"]
        assert [r.name for r in ranch.recipes.list(search="flour")] == ["Bread"]
        assert len(ranch.recipes.list(search=" ")) == 2

    def test_list_sorted_by_name(self, ranch, member):
        for name in ("stew", "Bread", "apple pie"):
            ranch.recipes.create({"name": name}, member)
        assert [r.name for r in ranch.recipes.list()] == ["apple pie", "Bread", "stew"]

    def test_update(self, ranch, member, health_cure):
        updated = ranch.recipes.update(
            health_cure.id, {"location": "Stove", "ingredients": [{"name": "Mint", "quantity": "1"}]}, member
        )
        assert updated.location == "Stove"
        assert [i.name for i in updated.ingredients] == ["Mint"]
        assert updated.name == "Potent Health Cure"
        assert updated.version == 2
        assert ranch.activity.recent()[0].action == "Updated recipe: Potent Health Cure"

    def test_update_rejects_unknown_field(self, ranch, member, health_cure):
        with pytest.raises(ValidationError):
            ranch.recipes.update(health_cure.id, {"created_by": "x"}, member)

    def test_stale_update_rejected(self, ranch, member, store, monkeypatch, health_cure):
        real_update = store.update

        def racing_update(collection, doc_id, fields, expected_version=None):
            real_update(collection, doc_id, {"notes": "someone else"})
            return real_update(collection, doc_id, fields, expected_version=expected_version)

        monkeypatch.setattr(store, "update", racing_update)
        with pytest.raises(ConcurrentUpdateError):
            ranch.recipes.update(health_cure.id, {"name": "Cure"}, member)

    def test_delete(self, ranch, member, other_member, health_cure):
        with pytest.raises(PermissionDeniedError):
            ranch.recipes.delete(health_cure.id, other_member)
        ranch.recipes.delete(health_cure.id, member)
        with pytest.raises(RecipeNotFoundError):
            ranch.recipes.get(health_cure.id)

    def test_crafting_activity_label(self, ranch, member):
        ranch.crafting.create({"name": "Lasso"}, member)
        assert ranch.activity.recent()[0].action == "Added crafting recipe: Lasso"

    def test_unknown_book(self, store, ranch):
        with pytest.raises(ValueError):
            RecipeBookService(store, ranch.activity, "potions")
        with pytest.raises(ValidationError):
            ranch.recipe_book("potions")
