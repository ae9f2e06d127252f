"""
String similarity helpers used by the fuzzy detection stage.
"""


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with a single rolling row."""
    if len(a) < len(b):
        a, b = b, a
    row = list(range(len(b) + 1))

    for i in range(1, len(a) + 1):
        prev = row[0]
        row[0] = i
        for j in range(1, len(b) + 1):
            current = row[j]
            if a[i - 1] == b[j - 1]:
                row[j] = prev
            else:
                row[j] = 1 + min(prev, row[j], row[j - 1])
            prev = current
    return row[len(b)]


def similarity(a: str, b: str) -> float:
    """1 - distance / max length; 1.0 for two empty strings."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - edit_distance(a, b) / longest
