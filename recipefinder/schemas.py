from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecipeIngredientIn(BaseModel):
    name: str = Field(..., min_length=1, json_schema_extra={"example": "flour"})
    quantity: str = Field("", json_schema_extra={"example": "2 cups"})

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("ingredient name must not be blank")
        return v


class RecipeBase(BaseModel):
    name: str = Field(
        ..., min_length=1, json_schema_extra={"example": "Simple Pancakes"}
    )
    description: str = Field(
        "", json_schema_extra={"example": "Fluffy weekend pancakes"}
    )
    instructions: str = Field(
        "",
        json_schema_extra={
            "example": "Mix dry ingredients. Add wet ingredients. Cook."
        },
    )
    prep_time_min: int = Field(0, ge=0)
    cook_time_min: int = Field(0, ge=0)


class RecipeCreate(RecipeBase):
    ingredients: List[RecipeIngredientIn] = Field(
        default_factory=list,
        json_schema_extra={
            "example": [
                {"name": "flour", "quantity": "200 g"},
                {"name": "milk", "quantity": "250 ml"},
                {"name": "egg", "quantity": "1"},
            ]
        },
    )


class RecipeIngredient(BaseModel):
    ingredient_id: int
    name: str
    quantity: str = ""

    model_config = ConfigDict(from_attributes=True)


class Recipe(RecipeBase):
    id: int
    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Ingredient(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class RecipePage(BaseModel):
    items: List[Recipe]
    total: int
    page: int
    page_size: int


class MatchResult(BaseModel):
    ingredient: str = ""
    score: float = 0.0
    match_type: str = ""  # exact, synonym, substitute, fuzzy
    original: str = ""


class RecipeMatchResult(BaseModel):
    recipe: Recipe
    overall_score: float
    match_details: List[MatchResult] = Field(default_factory=list)
    missing_count: int = 0
    extra_count: int = 0


class SearchRequest(BaseModel):
    query: str = ""
    ingredients: List[str] = Field(default_factory=list)
    max_results: int = 0
    min_match_score: float = 0.0
    use_advanced: bool = False


class SearchResponse(BaseModel):
    recipes: Optional[List[Recipe]] = None
    advanced_matches: Optional[List[RecipeMatchResult]] = None
    total_count: int = 0
    query: str = ""
    search_type: str


class SynonymCreate(BaseModel):
    canonical: str = Field(..., json_schema_extra={"example": "tomato"})
    synonym: str = Field(..., json_schema_extra={"example": "roma tomato"})

    @field_validator("canonical", "synonym")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class SubstituteCreate(BaseModel):
    ingredient: str = Field(..., json_schema_extra={"example": "butter"})
    substitute: str = Field(..., json_schema_extra={"example": "ghee"})

    @field_validator("ingredient", "substitute")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v
