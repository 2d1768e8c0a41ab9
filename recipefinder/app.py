import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, sessionmaker

from . import crud, schemas
from .config import ADMIN_TOKEN, API_DEFAULT_MAX_RESULTS, setup_logging
from .db import engine as default_engine
from .db import init_db
from .search import SearchService

logger = logging.getLogger(__name__)


def create_app(engine=None, admin_token: Optional[str] = ADMIN_TOKEN) -> FastAPI:
    engine = engine if engine is not None else default_engine
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        init_db(bind=engine)
        search = SearchService(app.state.store)
        app.state.search = search.start()
        yield
        search.close()

    app = FastAPI(title="recipefinder", lifespan=lifespan)
    app.state.session_factory = session_factory
    app.state.store = crud.SqlRecipeStore(session_factory)
    app.state.admin_token = admin_token

    # Allow CORS for API clients (adjust origins for production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_routes(app)
    return app


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_store(request: Request) -> crud.SqlRecipeStore:
    return request.app.state.store


def get_search(request: Request) -> SearchService:
    return request.app.state.search


def require_admin(request: Request, x_admin_token: Optional[str] = Header(None)):
    token = request.app.state.admin_token
    if token and x_admin_token != token:
        raise HTTPException(status_code=403, detail="Admin token required")


def _link_header(request: Request, page: int, page_size: int, total: int) -> str:
    links = []
    if page > 1:
        url = request.url.include_query_params(page=page - 1, page_size=page_size)
        links.append(f'<{url}>; rel="prev"')
    if page * page_size < total:
        url = request.url.include_query_params(page=page + 1, page_size=page_size)
        links.append(f'<{url}>; rel="next"')
    return ", ".join(links)


def _register_routes(app: FastAPI):

    @app.get("/health")
    def health(search: SearchService = Depends(get_search)):
        return {"status": "ok", "indexed_keywords": len(search.index)}

    # -- recipes ---------------------------------------------------------

    @app.get("/api/recipes", response_model=schemas.RecipePage)
    def list_recipes(
        request: Request,
        response: Response,
        q: Optional[str] = None,
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100),
        db: Session = Depends(get_db),
    ):
        skip = (page - 1) * page_size
        if q:
            found = crud.search_recipes_by_name(db, q)
            total = len(found)
            rows = found[skip:skip + page_size]
        else:
            total = crud.count_recipes(db)
            rows = crud.get_recipes(db, skip=skip, limit=page_size)
        link = _link_header(request, page, page_size, total)
        if link:
            response.headers["Link"] = link
        return schemas.RecipePage(
            items=[crud.to_schema(r) for r in rows],
            total=total,
            page=page,
            page_size=page_size,
        )

    @app.post("/api/recipes", response_model=schemas.Recipe)
    def create_recipe(
        payload: schemas.RecipeCreate,
        store: crud.SqlRecipeStore = Depends(get_store),
        search: SearchService = Depends(get_search),
    ):
        try:
            r = store.create(payload)
        except crud.DuplicateRecipeError as e:
            raise HTTPException(status_code=400, detail=str(e))
        search.notify_recipe_change(r.id)
        return r

    @app.get("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
    def get_recipe(recipe_id: int, store: crud.SqlRecipeStore = Depends(get_store)):
        r = store.get_by_id(recipe_id)
        if not r:
            raise HTTPException(status_code=404, detail="Recipe not found")
        return r

    @app.put("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
    def update_recipe(
        recipe_id: int,
        payload: schemas.RecipeCreate,
        store: crud.SqlRecipeStore = Depends(get_store),
        search: SearchService = Depends(get_search),
    ):
        try:
            r = store.update(recipe_id, payload)
        except crud.DuplicateRecipeError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not r:
            raise HTTPException(status_code=404, detail="Recipe not found")
        search.notify_recipe_change(r.id)
        return r

    @app.delete("/api/recipes/{recipe_id}")
    def delete_recipe(
        recipe_id: int,
        store: crud.SqlRecipeStore = Depends(get_store),
        search: SearchService = Depends(get_search),
    ):
        if not store.delete(recipe_id):
            raise HTTPException(status_code=404, detail="Recipe not found")
        search.notify_recipe_change(recipe_id)
        return {"deleted": True}

    # -- search ----------------------------------------------------------

    @app.post("/api/recipes/search/advanced", response_model=schemas.SearchResponse)
    def advanced_search(
        req: schemas.SearchRequest,
        search: SearchService = Depends(get_search),
    ):
        if req.max_results <= 0:
            req.max_results = API_DEFAULT_MAX_RESULTS
        response = search.comprehensive_search(req)
        logger.info(
            "Search type=%s returned %d result(s)",
            response.search_type, response.total_count,
        )
        return response

    @app.get("/api/search/keyword")
    def keyword_search(
        q: str = Query(..., min_length=1),
        search: SearchService = Depends(get_search),
    ):
        return {"keyword": q.strip().lower(), "recipe_ids": sorted(search.lookup_keyword(q))}

    # -- ingredients -----------------------------------------------------

    @app.get("/api/ingredients", response_model=List[schemas.Ingredient])
    def list_ingredients(store: crud.SqlRecipeStore = Depends(get_store)):
        return store.list_ingredients()

    @app.get("/api/ingredients/{name}/substitutes")
    def ingredient_substitutes(name: str, search: SearchService = Depends(get_search)):
        return {"substitutes": search.get_ingredient_substitutes(name)}

    @app.get("/api/ingredients/{name}/synonyms")
    def ingredient_synonyms(name: str, search: SearchService = Depends(get_search)):
        return {"synonyms": search.get_ingredient_synonyms(name)}

    @app.post(
        "/api/ingredients/synonyms",
        status_code=201,
        dependencies=[Depends(require_admin)],
    )
    def add_synonym(payload: schemas.SynonymCreate, search: SearchService = Depends(get_search)):
        search.add_ingredient_synonym(payload.canonical, payload.synonym)
        return {"status": "success", "message": "Synonym added successfully"}

    @app.post(
        "/api/ingredients/substitutes",
        status_code=201,
        dependencies=[Depends(require_admin)],
    )
    def add_substitute(payload: schemas.SubstituteCreate, search: SearchService = Depends(get_search)):
        search.add_ingredient_substitute(payload.ingredient, payload.substitute)
        return {"status": "success", "message": "Substitute added successfully"}


app = create_app()
