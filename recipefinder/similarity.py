from rapidfuzz.distance import Levenshtein


def similarity(a: str, b: str) -> float:
    """Similarity of two ingredient names in [0, 1].

    Equal strings score 1.0, a substring scores len(shorter) / len(longer),
    anything else scores 1 - distance / max length.
    """
    a, b = a.lower(), b.lower()
    if a == b:
        return 1.0
    if a in b or b in a:
        shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
        return len(shorter) / len(longer)
    max_len = max(len(a), len(b))
    distance = Levenshtein.distance(a, b)
    return max(0.0, 1.0 - distance / max_len)
