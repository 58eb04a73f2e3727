"""
Suggestion quality evaluation.

Re-scores a suggestion against an arbitrary context string. Not part of the
default pipeline; used for audits and re-ranking.
"""

from .types import Suggestion, SuggestionCategory, clamp_confidence

TOKEN_OVERLAP_BONUS = 0.1

CATEGORY_BONUS = {
    SuggestionCategory.UI_ELEMENT: 0.1,
    SuggestionCategory.ACTION: 0.05,
}


def evaluate_suggestion_quality(suggestion: Suggestion, context: str) -> float:
    """
    Score = confidence + 0.1 per overlapping (context token, suggestion token) pair
    + category bonus, clamped to 1.0.

    Tokens are lower-cased and split on whitespace; two tokens overlap when
    either one contains the other.
    """
    quality = suggestion.confidence

    context_words = context.lower().split()
    suggestion_words = suggestion.replacement_text.lower().split()

    overlapping_pairs = sum(
        1
        for context_word in context_words
        for suggestion_word in suggestion_words
        if suggestion_word in context_word or context_word in suggestion_word
    )
    quality += overlapping_pairs * TOKEN_OVERLAP_BONUS
    quality += CATEGORY_BONUS.get(suggestion.category, 0.0)

    return clamp_confidence(quality)
