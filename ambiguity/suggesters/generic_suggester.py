"""
Generic Suggester
Word-only fallback that ignores the context analysis entirely.
"""

from typing import List

from ..base_suggester import BaseSuggester
from ..services.mapping_config_service import MappingConfigService, WordTable
from ..types import AmbiguousMatch, AmbiguousWord, ContextAnalysis, Suggestion, SuggestionCategory


class GenericSuggester(BaseSuggester):
    """Every listed phrase for the word, at a constant low confidence."""

    CONFIDENCE = 0.4

    def __init__(self, generic_mappings: WordTable):
        self.generic_mappings = generic_mappings

    @classmethod
    def from_config(cls, config_service: MappingConfigService) -> 'GenericSuggester':
        return cls(config_service.get_generic_mappings())

    def suggest(self, match: AmbiguousMatch, analysis: ContextAnalysis) -> List[Suggestion]:
        return self.suggest_for_word(match.ambiguous_word)

    def suggest_for_word(self, word: AmbiguousWord) -> List[Suggestion]:
        return [
            Suggestion(replacement_text=phrase, confidence=self.CONFIDENCE, category=SuggestionCategory.GENERIC)
            for phrase in self.generic_mappings.get(word, [])
        ]
