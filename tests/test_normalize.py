import pytest

from recipefinder.matcher import IngredientMatcher
from recipefinder.normalize import Lexicon, Normalizer

from conftest import FakeStore


SAMPLES = [
    "", "   ", "Eggs", "egg", "  TOMATOES ", "all-purpose flour", "Sea Salt",
    "olive oil", "extra virgin olive oil", "dragonfruit", "Cheddar", "steak",
    "hen fruit", "cheese", "parmesan",
]


@pytest.fixture
def normalize():
    return Normalizer(Lexicon.default()).normalize


def test_alias_resolves_to_canonical(normalize):
    assert normalize("eggs") == "egg"
    assert normalize("  Tomatoes ") == "tomato"
    assert normalize("Parmesan") == "cheese"


def test_synonym_member_resolves_to_canonical(normalize):
    # not in the alias table, only listed as a synonym
    assert normalize("all-purpose flour") == "flour"
    assert normalize("Jasmine Rice") == "rice"
    assert normalize("steak") == "beef"


def test_unknown_normalizes_to_itself(normalize):
    assert normalize("  Dragonfruit ") == "dragonfruit"


def test_blank_is_empty(normalize):
    assert normalize("") == ""
    assert normalize("   ") == ""
    assert normalize(None) == ""


@pytest.mark.parametrize("raw", SAMPLES)
def test_normalize_is_idempotent(normalize, raw):
    once = normalize(raw)
    assert normalize(once) == once


@pytest.mark.parametrize("raw", SAMPLES)
def test_idempotent_after_canonical_becomes_synonym(raw):
    m = IngredientMatcher(FakeStore())
    # "egg" was a canonical key with "eggs" aliased to it
    assert m.add_synonym("hen fruit", "egg") is True
    once = m.normalize(raw)
    assert m.normalize(once) == once


def test_folded_key_moves_its_aliases_and_synonyms():
    m = IngredientMatcher(FakeStore())
    m.add_synonym("hen fruit", "egg")
    assert m.normalize("egg") == "hen fruit"
    assert m.normalize("Eggs") == "hen fruit"
    assert "egg" not in m.lexicon.synonyms
    assert sorted(m.get_synonyms("hen fruit")) == ["egg", "eggs"]

    m.add_synonym("cheese", "Cheddar")
    # cheddar was already an alias of cheese, so nothing changes
    assert m.normalize("mozzarella") == "cheese"


def test_chained_additions_stay_idempotent():
    m = IngredientMatcher(FakeStore(), Lexicon.empty())
    m.add_synonym("b", "a")
    m.add_synonym("c", "b")
    m.add_synonym("d", "c")
    for name in ["a", "b", "c", "d"]:
        assert m.normalize(name) == "d"
    assert sorted(m.get_synonyms("d")) == ["a", "b", "c"]


def test_empty_lexicon_only_lowercases():
    n = Normalizer(Lexicon.empty())
    assert n.normalize(" Eggs ") == "eggs"


def test_default_lexicon_is_a_fresh_copy():
    a = Lexicon.default()
    a.synonyms["egg"].append("hen fruit")
    assert "hen fruit" not in Lexicon.default().synonyms["egg"]
