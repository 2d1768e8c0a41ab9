import sys
from pathlib import Path

# Ensure project root is on sys.path so `recipefinder` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import pytest

from recipefinder import schemas


def make_recipe(recipe_id, name, ingredients=(), description=""):
    return schemas.Recipe(
        id=recipe_id,
        name=name,
        description=description,
        ingredients=[
            schemas.RecipeIngredient(ingredient_id=i + 1, name=ing)
            for i, ing in enumerate(ingredients)
        ],
    )


class FakeStore:
    """In-memory RecipeStore."""

    def __init__(self, recipes=()):
        self.recipes = {r.id: r for r in recipes}

    def put(self, recipe):
        self.recipes[recipe.id] = recipe

    def remove(self, recipe_id):
        self.recipes.pop(recipe_id, None)

    def get_all(self):
        return [self.recipes[k] for k in sorted(self.recipes)]

    def get_by_id(self, recipe_id):
        return self.recipes.get(recipe_id)

    def search_by_name(self, query):
        q = (query or "").strip().lower()
        return [
            r for r in self.get_all()
            if q in r.name.lower() or q in (r.description or "").lower()
        ]

    def search_by_ingredients(self, names):
        want = {n.strip().lower() for n in names if n and n.strip()}
        return [
            r for r in self.get_all()
            if want <= {i.name.lower() for i in r.ingredients}
        ]


@pytest.fixture
def store():
    return FakeStore([
        make_recipe(1, "Pancakes", ["flour", "milk", "egg"], "Fluffy breakfast"),
        make_recipe(2, "Omelette", ["egg", "butter", "salt"], "Quick eggs"),
        make_recipe(3, "Tomato Soup", ["tomato", "onion", "garlic"], "Warm, simple soup."),
        make_recipe(4, "Plain Water", [], "Nothing to match"),
    ])
