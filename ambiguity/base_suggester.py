"""
Base Suggester and Collaborator Interfaces

Abstract seams of the suggestion engine: candidate generators, and the
context classifier that characterises the text around a match.
"""

from abc import ABC, abstractmethod
from typing import List

from .types import AmbiguousMatch, ContextAnalysis, Suggestion


class BaseSuggester(ABC):
    """
    A single candidate stream.

    Suggesters are independent: each returns its own candidates in its own
    order and never deduplicates or ranks. Unknown words and empty hints
    yield an empty list, never an exception.
    """

    @abstractmethod
    def suggest(self, match: AmbiguousMatch, analysis: ContextAnalysis) -> List[Suggestion]:
        """Return candidate replacements for the match."""


class ContextClassifier(ABC):
    """
    Decides what the text around a match is about.

    Implemented outside this package; its output is treated as authoritative.
    """

    @abstractmethod
    def analyze_context(self, match: AmbiguousMatch) -> ContextAnalysis:
        """Classify the context of one match."""
