import logging
import sys
from pathlib import Path

from recipefinder import crud
from recipefinder.config import setup_logging
from recipefinder.db import SessionLocal, init_db
from recipefinder.normalize import Lexicon
from recipefinder.recipes import load_recipes

logger = logging.getLogger("import_data")


def main(argv=None):
    setup_logging()
    init_db()
    argv = sys.argv[1:] if argv is None else argv
    p = Path(argv[0]) if argv else Path(__file__).resolve().parents[1] / 'data' / 'recipes.json'

    store = crud.SqlRecipeStore(SessionLocal)
    seeded = store.seed_ingredients(Lexicon.default().canonical_names())
    logger.info('Seeded %d ingredient(s)', seeded)

    if not p.exists():
        logger.warning('%s not found', p)
        return
    added = 0
    for recipe in load_recipes(p):
        try:
            store.create(recipe)
        except crud.DuplicateRecipeError:
            logger.debug('Skipping existing recipe %r', recipe.name)
            continue
        added += 1
    logger.info('Imported %d recipes', added)


if __name__ == '__main__':
    main()
