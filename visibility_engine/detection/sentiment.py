"""
Keyword-window sentiment classifier.

Looks at a window of text around the first brand mention and counts
positive, negative and hedging phrases. Two or more hedges cancel one
positive signal.
"""

from typing import Tuple

from .models import Sentiment

WINDOW = 300
HEDGING_DAMPEN_AT = 2

POSITIVE_SIGNALS: Tuple[str, ...] = (
    "recommend", "highly recommend", "top pick", "best choice", "excellent",
    "outstanding", "leading", "popular choice", "well-regarded", "well-known",
    "trusted", "reliable", "powerful", "robust", "versatile", "intuitive",
    "user-friendly", "standout", "go-to", "first choice", "top-rated",
    "best-in-class", "market leader", "industry leader", "widely used",
    "great option", "strong contender", "ideal for", "perfect for",
    "excels at", "shines in", "impressed by", "love using", "highly rated",
    "worth considering", "solid choice",
)

NEGATIVE_SIGNALS: Tuple[str, ...] = (
    "not recommend", "wouldn't recommend", "avoid", "lacks", "limited",
    "expensive", "overpriced", "buggy", "unreliable", "clunky", "outdated",
    "steep learning curve", "poor support", "frustrating", "disappointing",
    "inferior", "falls short", "not ideal", "drawback", "downside",
    "weakness", "shortcoming", "better alternatives", "not the best",
    "hard to use", "difficult to", "complicated", "underwhelming",
    "mediocre", "subpar",
)

HEDGING_SIGNALS: Tuple[str, ...] = (
    "however", "although", "on the other hand", "that said", "keep in mind",
    "worth noting", "caveat", "depending on", "trade-off", "trade off",
)


def classify_sentiment(text: str, brand: str) -> Sentiment:
    """
    Classify how a response talks about a brand.

    Returns:
        NEUTRAL when the brand is absent or signals are balanced
    """
    lower = text.lower()
    brand_lower = brand.lower()

    index = lower.find(brand_lower) if brand_lower else -1
    if index == -1:
        return Sentiment.NEUTRAL

    window = lower[max(0, index - WINDOW):index + len(brand_lower) + WINDOW]

    positive = sum(1 for s in POSITIVE_SIGNALS if s in window)
    negative = sum(1 for s in NEGATIVE_SIGNALS if s in window)
    hedging = sum(1 for s in HEDGING_SIGNALS if s in window)

    if hedging >= HEDGING_DAMPEN_AT:
        positive = max(0, positive - 1)

    if positive > negative:
        return Sentiment.POSITIVE
    if negative > positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
