"""
Edit-distance suggestions for unresolved option and subcommand names.

The parser calls suggest() whenever a token does not resolve at the current
command level. Suggestions are advisory: they only feed the hint line of a
diagnostic and never change whether a parse succeeds.
"""
from collections.abc import Iterable

THRESHOLD = 3
"""Largest edit distance still considered a plausible typo."""


def distance(source, target, /):
    """
    Return the Levenshtein distance between two strings.

    Classic dynamic programming over the full (len(source)+1) x (len(target)+1)
    matrix: insertions, deletions and substitutions all cost one.

    Examples
    - distance("hots", "host")    -> 2
    - distance("play", "play")    -> 0
    - distance("", "seek")        -> 4
    """
    if not isinstance(source, str) or not isinstance(target, str):
        raise TypeError("distance() arguments must be strings")

    rows, columns = len(source) + 1, len(target) + 1
    matrix = [[0] * columns for _ in range(rows)]

    for row in range(rows):
        matrix[row][0] = row
    for column in range(columns):
        matrix[0][column] = column

    for row in range(1, rows):
        for column in range(1, columns):
            cost = 0 if source[row - 1] == target[column - 1] else 1
            matrix[row][column] = min(
                matrix[row - 1][column] + 1,
                matrix[row][column - 1] + 1,
                matrix[row - 1][column - 1] + cost,
            )

    return matrix[-1][-1]


def suggest(token, candidates, /, threshold=THRESHOLD):
    """
    Return the candidate closest to token, or None when none is close enough.

    Parameters
    - token: str
      The unresolved name, without any leading dashes.
    - candidates: Iterable[str]
      Valid names at the current level, in declaration order.
    - threshold: int
      Maximum accepted distance (inclusive).

    Ties are broken by first-encountered order.
    """
    if not isinstance(candidates, Iterable) or isinstance(candidates, str):
        raise TypeError("suggest() 'candidates' must be an iterable of strings")
    if not isinstance(threshold, int) or threshold < 0:
        raise ValueError("suggest() 'threshold' must be a non-negative integer")

    best, closest = None, threshold + 1
    for candidate in candidates:
        if (score := distance(token, candidate)) < closest:
            best, closest = candidate, score
    return best


__all__ = (
    "THRESHOLD",
    "distance",
    "suggest",
)
