"""
Merge, deduplicate and rank candidate streams.
"""

from typing import Iterable, List

from .types import Suggestion


def remove_duplicate_suggestions(suggestions: Iterable[Suggestion]) -> List[Suggestion]:
    """Keep the first occurrence of each replacement text, whatever the later confidences."""
    unique_suggestions = []
    seen_texts = set()

    for suggestion in suggestions:
        if suggestion.replacement_text not in seen_texts:
            seen_texts.add(suggestion.replacement_text)
            unique_suggestions.append(suggestion)

    return unique_suggestions


def rank_suggestions(*streams: Iterable[Suggestion], limit: int = 0) -> List[Suggestion]:
    """
    Concatenate streams in the given order, deduplicate, sort by descending confidence.

    Args:
        streams: Candidate lists in priority order for deduplication
        limit: Keep at most this many entries; 0 keeps everything

    Returns:
        The ranked list, possibly empty
    """
    combined = [suggestion for stream in streams for suggestion in stream]
    ranked = sorted(remove_duplicate_suggestions(combined), key=lambda s: s.confidence, reverse=True)
    if limit and limit > 0:
        ranked = ranked[:limit]
    return ranked
