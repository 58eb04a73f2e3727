"""
Contextual Suggester

Turns a ContextAnalysis into candidates through three independent streams:
UI-element hints, action hints and the context type.
"""

import logging
from typing import Dict, List

from ..base_suggester import BaseSuggester
from ..services.mapping_config_service import MappingConfigService, WordTable
from ..types import (
    AmbiguousMatch, AmbiguousWord, ActionHint, ActionType, ContextAnalysis,
    ContextType, ElementType, Suggestion, SuggestionCategory, UIElementHint,
    clamp_confidence
)

logger = logging.getLogger(__name__)


class ContextualSuggester(BaseSuggester):
    """
    Hint-driven candidates.

    Streams fire together and are concatenated in the order UI element,
    action, context type; merging happens later.
    """

    UI_ELEMENT_FACTOR = 0.8
    ACTION_FACTOR = 0.7
    CONTEXT_TYPE_CONFIDENCE = 0.6

    def __init__(self,
                 ui_element_mappings: Dict[ElementType, WordTable],
                 action_mappings: Dict[ActionType, WordTable],
                 context_type_mappings: Dict[ContextType, WordTable]):
        self.ui_element_mappings = ui_element_mappings
        self.action_mappings = action_mappings
        self.context_type_mappings = context_type_mappings

    @classmethod
    def from_config(cls, config_service: MappingConfigService) -> 'ContextualSuggester':
        return cls(
            config_service.get_ui_element_mappings(),
            config_service.get_action_mappings(),
            config_service.get_context_type_mappings(),
        )

    def suggest(self, match: AmbiguousMatch, analysis: ContextAnalysis) -> List[Suggestion]:
        word = match.ambiguous_word
        suggestions = []

        for ui_hint in analysis.ui_element_hints:
            suggestions.extend(self.generate_ui_element_suggestions(word, ui_hint))

        for action_hint in analysis.action_hints:
            suggestions.extend(self.generate_action_suggestions(word, action_hint))

        suggestions.extend(self.generate_context_type_suggestions(word, analysis.context_type))

        logger.debug(
            f"Contextual stream for '{word.value}': {len(suggestions)} candidates "
            f"({len(analysis.ui_element_hints)} element hints, {len(analysis.action_hints)} action hints)"
        )
        return suggestions

    def generate_ui_element_suggestions(self, word: AmbiguousWord, hint: UIElementHint) -> List[Suggestion]:
        phrases = self.ui_element_mappings.get(hint.element_type, {}).get(word, [])
        confidence = clamp_confidence(hint.confidence * self.UI_ELEMENT_FACTOR)
        return _build(phrases, confidence, SuggestionCategory.UI_ELEMENT)

    def generate_action_suggestions(self, word: AmbiguousWord, hint: ActionHint) -> List[Suggestion]:
        phrases = self.action_mappings.get(hint.action_type, {}).get(word, [])
        confidence = clamp_confidence(hint.confidence * self.ACTION_FACTOR)
        return _build(phrases, confidence, SuggestionCategory.ACTION)

    def generate_context_type_suggestions(self, word: AmbiguousWord, context_type: ContextType) -> List[Suggestion]:
        phrases = self.context_type_mappings.get(context_type, {}).get(word, [])
        return _build(phrases, self.CONTEXT_TYPE_CONFIDENCE, SuggestionCategory.CONTENT)


def _build(phrases: List[str], confidence: float, category: SuggestionCategory) -> List[Suggestion]:
    return [
        Suggestion(replacement_text=phrase, confidence=confidence, category=category)
        for phrase in phrases
    ]
