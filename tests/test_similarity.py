import itertools

import pytest

from recipefinder.similarity import similarity


WORDS = ["", "egg", "eggs", "butter", "buttr", "tomato", "cherry tomato", "Salt", "pepper", "paprika"]


def test_equal_is_one():
    assert similarity("egg", "egg") == 1.0
    assert similarity("Egg", "eGG") == 1.0
    assert similarity("", "") == 1.0


def test_containment_uses_length_ratio():
    assert similarity("tomato", "cherry tomato") == pytest.approx(6 / 13)
    assert similarity("egg", "eggs") == pytest.approx(3 / 4)


def test_edit_distance_similarity():
    # one deletion over six characters
    assert similarity("buttr", "butter") == pytest.approx(5 / 6)
    assert similarity("salt", "malt") == pytest.approx(0.75)


def test_unrelated_words_never_negative():
    assert similarity("abc", "xyzuvw") == 0.0


@pytest.mark.parametrize("a,b", list(itertools.combinations(WORDS, 2)))
def test_symmetric_and_bounded(a, b):
    s = similarity(a, b)
    assert s == similarity(b, a)
    assert 0.0 <= s <= 1.0


def test_distance_counts_each_edit_once():
    # kitten -> sitting: two substitutions and one insertion
    assert similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)
    assert similarity("Flour", "FLOUR") == 1.0
    assert similarity("", "abc") == 0.0
