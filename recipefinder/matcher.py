"""Scored ingredient matching.

Every recipe ingredient is paired with the best user ingredient it can find:

    exact       1.0   normalized names are equal
    synonym     0.9   either name lists the other as a synonym
    substitute  0.7   either name lists the other as a substitute
    fuzzy       sim   similarity() above FUZZY_THRESHOLD

A pairing only counts when its score is above MATCH_THRESHOLD. The recipe
score is the matched fraction minus penalties for missing recipe ingredients
and for unused user ingredients.
"""
import logging
import threading
from typing import Iterable, List, Optional, Sequence

from .normalize import Lexicon, Normalizer
from .schemas import MatchResult, Recipe, RecipeMatchResult
from .similarity import similarity

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.3
FUZZY_THRESHOLD = 0.6
SYNONYM_SCORE = 0.9
SUBSTITUTE_SCORE = 0.7
MISSING_PENALTY = 0.2
EXTRA_PENALTY = 0.05


class IngredientMatcher:
    def __init__(self, store, lexicon: Optional[Lexicon] = None):
        self.store = store
        self.lexicon = lexicon if lexicon is not None else Lexicon.default()
        self.normalizer = Normalizer(self.lexicon)
        self._lock = threading.RLock()

    def normalize(self, name: str) -> str:
        with self._lock:
            return self.normalizer.normalize(name)

    # -- lexicon lookups -------------------------------------------------

    def get_substitutes(self, ingredient: str) -> List[str]:
        with self._lock:
            key = self.normalizer.normalize(ingredient)
            return list(self.lexicon.substitutes.get(key, []))

    def get_synonyms(self, ingredient: str) -> List[str]:
        with self._lock:
            key = self.normalizer.normalize(ingredient)
            return list(self.lexicon.synonyms.get(key, []))

    def add_synonym(self, canonical: str, synonym: str) -> bool:
        """Register `synonym` for `canonical`. Returns False on a no-op."""
        with self._lock:
            canonical = self.normalizer.normalize(canonical)
            synonym = self.normalizer.normalize(synonym)
            if not canonical or not synonym or canonical == synonym:
                return False
            members = self.lexicon.synonyms.setdefault(canonical, [])
            if synonym in members:
                return False
            members.append(synonym)
            aliases = self.lexicon.aliases
            aliases[synonym] = canonical
            # synonym may already be a key or an alias target; fold it in
            for alias, target in aliases.items():
                if target == synonym:
                    aliases[alias] = canonical
            for member in self.lexicon.synonyms.pop(synonym, []):
                if member != canonical and member not in members:
                    members.append(member)
        logger.info("Added synonym %r for %r", synonym, canonical)
        return True

    def add_substitute(self, ingredient: str, substitute: str) -> bool:
        """Register `substitute` for `ingredient`. Returns False on a no-op."""
        with self._lock:
            ingredient = self.normalizer.normalize(ingredient)
            substitute = self.normalizer.normalize(substitute)
            if not ingredient or not substitute or ingredient == substitute:
                return False
            members = self.lexicon.substitutes.setdefault(ingredient, [])
            if substitute in members:
                return False
            members.append(substitute)
        logger.info("Added substitute %r for %r", substitute, ingredient)
        return True

    # The tables are directed, but comparisons look in both directions.

    def is_synonym(self, a: str, b: str) -> bool:
        synonyms = self.lexicon.synonyms
        return b in synonyms.get(a, ()) or a in synonyms.get(b, ())

    def is_substitute(self, a: str, b: str) -> bool:
        substitutes = self.lexicon.substitutes
        return b in substitutes.get(a, ()) or a in substitutes.get(b, ())

    # -- matching --------------------------------------------------------

    def match_ingredients(
        self, user_ingredients: Sequence[str], max_results: int = 0
    ) -> List[RecipeMatchResult]:
        """Rank every recipe in the store against `user_ingredients`."""
        # distinct originals, blanks dropped
        originals = [s for s in dict.fromkeys(user_ingredients) if s and s.strip()]
        with self._lock:
            normalized = {self.normalizer.normalize(s) for s in originals}
        normalized.discard("")
        if not normalized:
            return []

        recipes = self.store.get_all()
        results = []
        with self._lock:
            for recipe in recipes:
                if not recipe.ingredients:
                    continue
                result = self._score_recipe(recipe, originals)
                if result.overall_score > 0:
                    results.append(result)

        results.sort(key=lambda r: (-r.overall_score, r.recipe.id))
        if max_results > 0:
            results = results[:max_results]
        logger.debug(
            "Matched %d ingredient(s) against %d recipe(s): %d result(s)",
            len(normalized), len(recipes), len(results),
        )
        return results

    def _score_recipe(
        self, recipe: Recipe, originals: List[str]
    ) -> RecipeMatchResult:
        details = []
        matched_recipe = set()
        matched_user = set()

        for ing in recipe.ingredients:
            name = self.normalizer.normalize(ing.name)
            best = self.find_best_match(name, originals)
            if best.score > MATCH_THRESHOLD:
                details.append(best)
                matched_recipe.add(name)
                matched_user.add(best.original)

        total = len(recipe.ingredients)
        missing = total - len(matched_recipe)
        extra = sum(1 for s in originals if s not in matched_user)
        base = len(matched_recipe) / total
        overall = base - missing * MISSING_PENALTY - extra * EXTRA_PENALTY

        return RecipeMatchResult(
            recipe=recipe,
            overall_score=max(0.0, overall),
            match_details=details,
            missing_count=missing,
            extra_count=extra,
        )

    def find_best_match(
        self, recipe_ingredient: str, user_ingredients: Iterable[str]
    ) -> MatchResult:
        """Best pairing for one normalized recipe ingredient.

        An exact hit anywhere in the list wins outright, then the first
        synonym hit; substitute and fuzzy candidates compete on score across
        all user ingredients.
        """
        candidates = [
            (original, self.normalizer.normalize(original))
            for original in user_ingredients
        ]
        for original, user in candidates:
            if user == recipe_ingredient:
                return MatchResult(
                    ingredient=recipe_ingredient, score=1.0,
                    match_type="exact", original=original,
                )

        best = MatchResult()
        for original, user in candidates:
            if self.is_synonym(user, recipe_ingredient):
                return MatchResult(
                    ingredient=recipe_ingredient, score=SYNONYM_SCORE,
                    match_type="synonym", original=original,
                )
            if (
                self.is_substitute(user, recipe_ingredient)
                and SUBSTITUTE_SCORE > best.score
            ):
                best = MatchResult(
                    ingredient=recipe_ingredient, score=SUBSTITUTE_SCORE,
                    match_type="substitute", original=original,
                )
            sim = similarity(user, recipe_ingredient)
            if sim > FUZZY_THRESHOLD and sim > best.score:
                best = MatchResult(
                    ingredient=recipe_ingredient, score=sim,
                    match_type="fuzzy", original=original,
                )
        return best
