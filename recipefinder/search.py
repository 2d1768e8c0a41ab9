import logging
from typing import List, Optional, Sequence, Set

from .config import DEFAULT_MAX_RESULTS, INDEX_QUEUE_SIZE
from .keyword_index import IndexUpdater, KeywordIndex, tokenize_recipe
from .matcher import IngredientMatcher
from .normalize import Lexicon
from .schemas import Recipe, RecipeMatchResult, SearchRequest, SearchResponse

logger = logging.getLogger(__name__)


class SearchService:
    """Entry point for recipe search.

    Owns the ingredient matcher and the keyword index together with the
    background worker that keeps the index in step with the store.
    """

    def __init__(
        self,
        store,
        lexicon: Optional[Lexicon] = None,
        queue_size: int = INDEX_QUEUE_SIZE,
        default_max_results: int = DEFAULT_MAX_RESULTS,
    ):
        self.store = store
        self.matcher = IngredientMatcher(store, lexicon)
        self.index = KeywordIndex()
        self.updater = IndexUpdater(self.reindex_recipe, maxsize=queue_size)
        self.default_max_results = default_max_results

    # -- lifecycle -------------------------------------------------------

    def start(self) -> "SearchService":
        self.updater.start()
        self.rebuild_index()
        logger.info("Search service started")
        return self

    def close(self, timeout: Optional[float] = 5.0) -> bool:
        stopped = self.updater.stop(timeout)
        if stopped:
            logger.info("Search service stopped")
        return stopped

    # -- keyword index ---------------------------------------------------

    def rebuild_index(self) -> None:
        self.index.rebuild(self.store.get_all())

    def reindex_recipe(self, recipe_id: int) -> None:
        recipe = self.store.get_by_id(recipe_id)
        if recipe is None:
            # deleted: drop whatever was indexed for it
            logger.debug("Recipe %s not found, removing from index", recipe_id)
            self.index.remove_recipe(recipe_id)
            return
        self.index.replace_recipe(recipe_id, tokenize_recipe(recipe))
        logger.debug("Reindexed recipe %s", recipe_id)

    def notify_recipe_change(self, recipe_id: int) -> bool:
        return self.updater.notify(recipe_id)

    def lookup_keyword(self, keyword: str) -> Set[int]:
        return self.index.lookup(keyword)

    # -- searches --------------------------------------------------------

    def search_by_name(self, query: str) -> List[Recipe]:
        return self.store.search_by_name(query)

    def search_by_ingredients(self, names: Sequence[str]) -> List[Recipe]:
        return self.store.search_by_ingredients(names)

    def advanced_ingredient_search(
        self, user_ingredients: Sequence[str], max_results: int
    ) -> List[RecipeMatchResult]:
        return self.matcher.match_ingredients(user_ingredients, max_results)

    def comprehensive_search(self, req: SearchRequest) -> SearchResponse:
        max_results = req.max_results if req.max_results > 0 else self.default_max_results

        if req.use_advanced and req.ingredients:
            matches = self.advanced_ingredient_search(req.ingredients, max_results)
            if req.min_match_score > 0:
                matches = [m for m in matches if m.overall_score >= req.min_match_score]
            return SearchResponse(
                recipes=[m.recipe for m in matches],
                advanced_matches=matches,
                total_count=len(matches),
                query=req.query,
                search_type="advanced_ingredient",
            )

        if req.ingredients:
            recipes = self.search_by_ingredients(req.ingredients)
            search_type = "basic_ingredient"
        elif req.query:
            recipes = self.search_by_name(req.query)
            search_type = "text"
        else:
            recipes = self.store.get_all()
            search_type = "all"

        recipes = recipes[:max_results]
        return SearchResponse(
            recipes=recipes,
            total_count=len(recipes),
            query=req.query,
            search_type=search_type,
        )

    # -- lexicon ---------------------------------------------------------

    def get_ingredient_substitutes(self, name: str) -> List[str]:
        return self.matcher.get_substitutes(name)

    def get_ingredient_synonyms(self, name: str) -> List[str]:
        return self.matcher.get_synonyms(name)

    def add_ingredient_synonym(self, canonical: str, synonym: str) -> bool:
        return self.matcher.add_synonym(canonical, synonym)

    def add_ingredient_substitute(self, ingredient: str, substitute: str) -> bool:
        return self.matcher.add_substitute(ingredient, substitute)
