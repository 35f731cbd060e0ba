"""
Edit-distance based similarity between two (already normalized) strings.
"""

MAX_COMPARABLE_LENGTH = 500


def levenshtein_distance(a: str, b: str) -> int:
    """
    Classic dynamic-programming edit distance with unit costs for substitution,
    insertion and deletion. The cost table has (len(b) + 1) rows of (len(a) + 1) cells.
    """
    matrix = [[0] * (len(a) + 1) for _ in range(len(b) + 1)]
    for i in range(len(b) + 1):
        matrix[i][0] = i
    for j in range(len(a) + 1):
        matrix[0][j] = j

    for i in range(1, len(b) + 1):
        for j in range(1, len(a) + 1):
            if b[i - 1] == a[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = min(
                    matrix[i - 1][j - 1] + 1,
                    matrix[i][j - 1] + 1,
                    matrix[i - 1][j] + 1,
                )
    return matrix[len(b)][len(a)]


def similarity(a: str, b: str) -> float:
    """
    Return a similarity ratio in [0, 1]: (longest - distance) / longest.

    Both strings empty counts as identical (1.0). The quadratic table is only acceptable
    for short joke-sized inputs, so anything longer than MAX_COMPARABLE_LENGTH is refused.
    """
    if len(a) > MAX_COMPARABLE_LENGTH or len(b) > MAX_COMPARABLE_LENGTH:
        raise ValueError(
            f"similarity() only supports inputs up to {MAX_COMPARABLE_LENGTH} characters"
        )
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    distance = levenshtein_distance(a, b)
    return (longest - distance) / longest
