"""
Near-match expansion of a seed word over the corpus.

A corpus word matches when it shares the seed's first three letters or sits
within edit distance 2 of it (both compared case-insensitively).
"""

from typing import Container, Iterable, List

from lexicon import is_eligible

MAX_DISTANCE = 2
PREFIX_LENGTH = 3


def levenshtein(a: str, b: str) -> int:
    # Two-row DP over the full strings, unit costs.
    prev = list(range(len(a) + 1))
    for j in range(1, len(b) + 1):
        cur = [j] + [0] * len(a)
        for i in range(1, len(a) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            cur[i] = min(cur[i - 1] + 1, prev[i] + 1, prev[i - 1] + cost)
        prev = cur
    return prev[len(a)]


def is_similar(seed: str, word: str) -> bool:
    low_seed = seed.lower()
    low_word = word.lower()
    if low_word.startswith(low_seed[:PREFIX_LENGTH]):
        return True
    return levenshtein(low_seed, low_word) <= MAX_DISTANCE


def similar_words(seed: str, lexicon: Iterable[str], seen: Container[str], limit: int = 10) -> List[str]:
    """Return the seed (if still unchecked) followed by up to `limit` unchecked near-matches."""
    matches = []
    if limit > 0:
        for word in lexicon:
            if not is_eligible(word) or word in seen:
                continue
            if is_similar(seed, word):
                matches.append(word)
                if len(matches) >= limit:
                    break

    if is_eligible(seed) and seed not in seen:
        matches.insert(0, seed)

    # dict keeps first occurrence order
    return list(dict.fromkeys(matches))
