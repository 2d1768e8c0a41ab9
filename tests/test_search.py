import pytest

from recipefinder.schemas import SearchRequest
from recipefinder.search import SearchService

from conftest import FakeStore, make_recipe


@pytest.fixture
def service(store):
    svc = SearchService(store).start()
    yield svc
    svc.close()


def test_startup_builds_index(service):
    assert service.lookup_keyword("tomato") == {3}
    assert service.lookup_keyword("egg") == {1, 2}


def test_reindex_round_trip(service, store):
    store.put(make_recipe(3, "Potato Soup", ["potato", "onion"]))
    assert service.notify_recipe_change(3) is True
    service.updater.join()
    assert 3 not in service.lookup_keyword("tomato")
    assert service.lookup_keyword("potato") == {3}
    assert 3 in service.lookup_keyword("soup")


def test_notify_for_unknown_recipe_is_absorbed(service, store):
    before = {k: service.lookup_keyword(k) for k in service.index.keywords()}
    assert service.notify_recipe_change(999) is True
    service.updater.join()
    assert {k: service.lookup_keyword(k) for k in service.index.keywords()} == before
    # the worker keeps going
    store.put(make_recipe(5, "Banana Bread", ["banana", "flour"]))
    service.notify_recipe_change(5)
    service.updater.join()
    assert service.lookup_keyword("banana") == {5}


def test_deleted_recipe_leaves_index(service, store):
    store.remove(3)
    service.notify_recipe_change(3)
    service.updater.join()
    assert service.lookup_keyword("tomato") == set()
    assert service.lookup_keyword("garlic") == set()


def test_notify_never_blocks_when_queue_full(store):
    # worker not started, so nothing drains the queue
    svc = SearchService(store, queue_size=3)
    results = [svc.notify_recipe_change(i) for i in range(20)]
    assert results.count(True) == 3
    assert svc.updater.dropped == 17


def test_advanced_mode(service):
    resp = service.comprehensive_search(
        SearchRequest(ingredients=["egg", "buttr"], use_advanced=True)
    )
    assert resp.search_type == "advanced_ingredient"
    assert resp.total_count == 1
    assert resp.advanced_matches[0].recipe.name == "Omelette"
    assert [r.name for r in resp.recipes] == ["Omelette"]


def test_advanced_mode_min_score_filter(service):
    req = SearchRequest(
        ingredients=["egg", "flour", "milk", "butter"], use_advanced=True
    )
    resp = service.comprehensive_search(req)
    scores = [(m.recipe.name, m.overall_score) for m in resp.advanced_matches]
    assert [name for name, _ in scores] == ["Pancakes", "Omelette"]
    # pancakes: all three matched, butter is one extra
    assert scores[0][1] == pytest.approx(0.95)
    # omelette: salt missing, flour and milk are extras
    assert scores[1][1] == pytest.approx(2 / 3 - 0.2 - 0.1)

    req.min_match_score = 0.5
    resp = service.comprehensive_search(req)
    assert [m.recipe.name for m in resp.advanced_matches] == ["Pancakes"]
    assert resp.total_count == 1


def test_basic_ingredient_mode(service):
    resp = service.comprehensive_search(
        SearchRequest(ingredients=["Egg", " flour "], use_advanced=False)
    )
    assert resp.search_type == "basic_ingredient"
    assert [r.name for r in resp.recipes] == ["Pancakes"]
    assert resp.advanced_matches is None


def test_text_mode(service):
    resp = service.comprehensive_search(SearchRequest(query="soup"))
    assert resp.search_type == "text"
    assert resp.query == "soup"
    assert [r.id for r in resp.recipes] == [3]


def test_all_mode_and_default_limit():
    store = FakeStore([make_recipe(i, f"Dish {i}", ["egg"]) for i in range(1, 61)])
    svc = SearchService(store)
    resp = svc.comprehensive_search(SearchRequest())
    assert resp.search_type == "all"
    assert resp.total_count == 50
    resp = svc.comprehensive_search(SearchRequest(max_results=5))
    assert resp.total_count == 5


def test_advanced_flag_without_ingredients_falls_through(service):
    resp = service.comprehensive_search(SearchRequest(query="eggs", use_advanced=True))
    assert resp.search_type == "text"
    assert [r.name for r in resp.recipes] == ["Omelette"]


def test_lexicon_passthrough(service):
    assert "margarine" in service.get_ingredient_substitutes("Butter")
    assert service.add_ingredient_substitute("butter", "ghee") is True
    assert service.add_ingredient_substitute("butter", "ghee") is False
    assert service.get_ingredient_substitutes("butter").count("ghee") == 1
    service.add_ingredient_synonym("egg", "hen egg")
    assert "hen egg" in service.get_ingredient_synonyms("eggs")
