"""Ingredient lexicon and name normalization.

A raw ingredient string is lowercased and trimmed, then resolved through the
alias table and the synonym table to its canonical key. Unknown names
normalize to themselves so they can still be matched fuzzily.
"""
import copy
from dataclasses import dataclass, field
from typing import Dict, List

# canonical -> synonyms
SYNONYMS = {
    "egg": ["eggs"],
    "flour": ["all-purpose flour", "plain flour", "white flour", "wheat flour"],
    "sugar": ["white sugar", "granulated sugar", "table sugar"],
    "butter": ["unsalted butter", "salted butter"],
    "milk": ["whole milk", "cow milk", "dairy milk"],
    "onion": ["yellow onion", "white onion", "red onion"],
    "garlic": ["garlic clove", "garlic cloves"],
    "tomato": ["tomatoes", "fresh tomato", "ripe tomato"],
    "potato": ["potatoes", "russet potato", "red potato"],
    "carrot": ["carrots", "baby carrot"],
    "chicken": ["chicken breast", "chicken thigh", "chicken meat"],
    "beef": ["ground beef", "beef meat", "steak"],
    "rice": ["white rice", "brown rice", "jasmine rice"],
    "pasta": ["spaghetti", "penne", "macaroni"],
    "cheese": ["cheddar", "mozzarella", "parmesan"],
    "olive oil": ["extra virgin olive oil", "olive oil"],
    "salt": ["table salt", "sea salt"],
    "pepper": ["black pepper", "ground pepper"],
}

# variant -> canonical
ALIASES = {
    "eggs": "egg",
    "tomatoes": "tomato",
    "potatoes": "potato",
    "carrots": "carrot",
    "onions": "onion",
    "garlic cloves": "garlic",
    "chicken breast": "chicken",
    "ground beef": "beef",
    "spaghetti": "pasta",
    "cheddar": "cheese",
    "mozzarella": "cheese",
    "parmesan": "cheese",
    "black pepper": "pepper",
    "sea salt": "salt",
    "table salt": "salt",
}

# ingredient -> what can stand in for it
SUBSTITUTES = {
    "egg": ["flax egg", "chia egg", "apple sauce", "banana"],
    "butter": ["margarine", "coconut oil", "vegetable oil", "apple sauce"],
    "sugar": ["honey", "maple syrup", "agave nectar", "stevia"],
    "milk": ["almond milk", "soy milk", "oat milk", "coconut milk"],
    "flour": ["almond flour", "coconut flour", "oat flour", "rice flour"],
    "sour cream": ["yogurt", "buttermilk", "cream cheese"],
    "mayonnaise": ["greek yogurt", "avocado", "hummus"],
    "rice": ["quinoa", "couscous", "cauliflower rice"],
    "pasta": ["zucchini noodles", "spaghetti squash", "rice noodles"],
}


@dataclass
class Lexicon:
    """The three lookup tables the matcher works from."""

    synonyms: Dict[str, List[str]] = field(default_factory=dict)
    aliases: Dict[str, str] = field(default_factory=dict)
    substitutes: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "Lexicon":
        # deep copies: a matcher may mutate its own tables at runtime
        return cls(
            synonyms=copy.deepcopy(SYNONYMS),
            aliases=dict(ALIASES),
            substitutes=copy.deepcopy(SUBSTITUTES),
        )

    @classmethod
    def empty(cls) -> "Lexicon":
        return cls()

    def canonical_names(self) -> List[str]:
        names = list(self.synonyms)
        names.extend(k for k in self.substitutes if k not in self.synonyms)
        return names


class Normalizer:
    def __init__(self, lexicon: Lexicon):
        self.lexicon = lexicon

    def normalize(self, raw: str) -> str:
        if not raw:
            return ""
        name = raw.strip().lower()
        canonical = self.lexicon.aliases.get(name)
        if canonical is not None:
            return canonical
        for key, members in self.lexicon.synonyms.items():
            if name in members:
                return key
        return name

