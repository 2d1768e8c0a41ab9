import json
from pathlib import Path
from typing import List

from .schemas import RecipeCreate, RecipeIngredientIn


def load_recipes(path) -> List[RecipeCreate]:
    """Load recipes from a JSON file.

    Each entry needs a ``name``; ``ingredients`` may hold plain names or
    ``{"name": ..., "quantity": ...}`` objects. Entries without a name are
    skipped.

    Args:
        path (str or Path): Path to the JSON file.

    Returns:
        list: RecipeCreate payloads, in file order.
    """
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    recipes = []
    for entry in data:
        if not entry.get("name"):
            continue
        ingredients = []
        for ing in entry.get("ingredients") or []:
            if isinstance(ing, str):
                ing = {"name": ing}
            if ing.get("name", "").strip():
                ingredients.append(RecipeIngredientIn(**ing))
        recipes.append(RecipeCreate(
            name=entry["name"],
            description=entry.get("description", ""),
            instructions=entry.get("instructions", ""),
            prep_time_min=entry.get("prep_time_min", 0),
            cook_time_min=entry.get("cook_time_min", 0),
            ingredients=ingredients,
        ))
    return recipes
