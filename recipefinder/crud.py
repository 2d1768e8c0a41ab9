from typing import Iterable, List, Optional, Protocol, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas


class DuplicateRecipeError(ValueError):
    pass


class RecipeStore(Protocol):
    """What the search core needs from recipe storage."""

    def get_all(self) -> List[schemas.Recipe]:
        ...

    def get_by_id(self, recipe_id: int) -> Optional[schemas.Recipe]:
        ...

    def search_by_name(self, query: str) -> List[schemas.Recipe]:
        ...

    def search_by_ingredients(self, names: Sequence[str]) -> List[schemas.Recipe]:
        ...


def get_recipe(db: Session, recipe_id: int):
    return db.get(models.Recipe, recipe_id)


def get_recipes(db: Session, skip: int = 0, limit: int = 100):
    return (
        db.query(models.Recipe)
        .order_by(models.Recipe.id)
        .offset(skip)
        .limit(limit)
        .all()
    )


def count_recipes(db: Session) -> int:
    return db.query(func.count(models.Recipe.id)).scalar()


def search_recipes_by_name(db: Session, query: str):
    q = (query or "").strip().lower()
    stmt = db.query(models.Recipe).order_by(models.Recipe.id)
    if not q:
        return stmt.all()
    pattern = f"%{q}%"
    return stmt.filter(
        or_(
            func.lower(models.Recipe.name).like(pattern),
            func.lower(func.coalesce(models.Recipe.description, "")).like(pattern),
        )
    ).all()


def search_recipes_by_ingredients(db: Session, names: Iterable[str]):
    want = {n.strip().lower() for n in names or [] if n and n.strip()}
    if not want:
        return db.query(models.Recipe).order_by(models.Recipe.id).all()
    ing_name = func.lower(models.Ingredient.name)
    matching_ids = (
        select(models.RecipeIngredient.recipe_id)
        .join(models.Ingredient, models.Ingredient.id == models.RecipeIngredient.ingredient_id)
        .where(ing_name.in_(want))
        .group_by(models.RecipeIngredient.recipe_id)
        .having(func.count(func.distinct(ing_name)) == len(want))
    )
    return (
        db.query(models.Recipe)
        .filter(models.Recipe.id.in_(matching_ids))
        .order_by(models.Recipe.id)
        .all()
    )


def list_ingredients(db: Session):
    return db.query(models.Ingredient).order_by(models.Ingredient.name).all()


def get_or_create_ingredient(db: Session, name: str):
    name = name.strip().lower()
    ing = (
        db.query(models.Ingredient)
        .filter(models.Ingredient.name == name)
        .first()
    )
    if ing is None:
        ing = models.Ingredient(name=name)
        db.add(ing)
        db.flush()
    return ing


def _set_ingredients(db: Session, db_recipe, items):
    db_recipe.ingredients.clear()
    db.flush()
    seen = set()
    for item in items or []:
        ing = get_or_create_ingredient(db, item.name)
        if ing.id in seen:
            continue
        seen.add(ing.id)
        db_recipe.ingredients.append(
            models.RecipeIngredient(ingredient=ing, quantity=item.quantity or "")
        )


def _flush(db: Session, name: str):
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateRecipeError(f"Recipe named {name!r} already exists")


def create_recipe(db: Session, recipe: schemas.RecipeCreate):
    db_recipe = models.Recipe(
        name=recipe.name,
        description=recipe.description or "",
        instructions=recipe.instructions or "",
        prep_time_min=recipe.prep_time_min,
        cook_time_min=recipe.cook_time_min,
    )
    db.add(db_recipe)
    _flush(db, recipe.name)
    _set_ingredients(db, db_recipe, recipe.ingredients)
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def update_recipe(db: Session, recipe_id: int, recipe: schemas.RecipeCreate):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return None
    db_recipe.name = recipe.name
    db_recipe.description = recipe.description or ""
    db_recipe.instructions = recipe.instructions or ""
    db_recipe.prep_time_min = recipe.prep_time_min
    db_recipe.cook_time_min = recipe.cook_time_min
    _flush(db, recipe.name)
    _set_ingredients(db, db_recipe, recipe.ingredients)
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def delete_recipe(db: Session, recipe_id: int):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return False
    db.delete(db_recipe)
    db.commit()
    return True


def to_schema(db_recipe) -> schemas.Recipe:
    return schemas.Recipe.model_validate(db_recipe)


class SqlRecipeStore:
    """RecipeStore backed by SQLAlchemy.

    Every call opens its own session, so the store can be shared between
    request threads and the index worker.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get_all(self) -> List[schemas.Recipe]:
        with self.session_factory() as db:
            return [to_schema(r) for r in get_recipes(db, 0, None)]

    def get_by_id(self, recipe_id: int) -> Optional[schemas.Recipe]:
        with self.session_factory() as db:
            r = get_recipe(db, recipe_id)
            return to_schema(r) if r else None

    def search_by_name(self, query: str) -> List[schemas.Recipe]:
        with self.session_factory() as db:
            return [to_schema(r) for r in search_recipes_by_name(db, query)]

    def search_by_ingredients(self, names: Sequence[str]) -> List[schemas.Recipe]:
        with self.session_factory() as db:
            return [to_schema(r) for r in search_recipes_by_ingredients(db, names)]

    def list_ingredients(self) -> List[schemas.Ingredient]:
        with self.session_factory() as db:
            return [schemas.Ingredient.model_validate(i) for i in list_ingredients(db)]

    def seed_ingredients(self, names: Iterable[str]) -> int:
        """Make sure each name exists in the ingredients table."""
        with self.session_factory() as db:
            before = db.query(func.count(models.Ingredient.id)).scalar()
            for name in names:
                if name and name.strip():
                    get_or_create_ingredient(db, name)
            db.commit()
            return db.query(func.count(models.Ingredient.id)).scalar() - before

    def create(self, recipe: schemas.RecipeCreate) -> schemas.Recipe:
        with self.session_factory() as db:
            return to_schema(create_recipe(db, recipe))

    def update(self, recipe_id: int, recipe: schemas.RecipeCreate) -> Optional[schemas.Recipe]:
        with self.session_factory() as db:
            r = update_recipe(db, recipe_id, recipe)
            return to_schema(r) if r else None

    def delete(self, recipe_id: int) -> bool:
        with self.session_factory() as db:
            return delete_recipe(db, recipe_id)
