"""
Layout Suggester

Candidates derived from where the text unit sits in the document tree:
the component it belongs to, its parent layer's name and the layer
hierarchy above it. Only fires when the match carries LayoutInfo.
"""

import logging
import re
from typing import Dict, Any, List, Optional

from ..base_suggester import BaseSuggester
from ..errors import MappingConfigError
from ..services.mapping_config_service import MappingConfigService, parse_enum, parse_word_list
from ..types import (
    AmbiguousMatch, ContextAnalysis, LayoutInfo, Suggestion, SuggestionCategory
)

logger = logging.getLogger(__name__)


class LayoutSuggester(BaseSuggester):
    """Layout names are strong evidence, so these confidences sit above the hint streams."""

    def __init__(self, patterns: Dict[str, Any]):
        try:
            components = patterns['component_names']
            self.button_markers = list(components['button_markers'])
            self.press_markers = list(components['press_markers'])
            self.action_confidence = float(components['action_confidence'])
            self.action_components = list(components['action_components'])
            self.button_fallback = dict(components['button_fallback'])
            self.element_confidence = float(components['element_confidence'])
            self.element_components = list(components['element_components'])

            self.parent_patterns = [
                (re.compile(entry['pattern']), entry['text'], float(entry['confidence']))
                for entry in patterns['parent_names']
            ]
            self.hierarchy_patterns = [
                (list(entry['markers']), entry['text'], float(entry['confidence']),
                 parse_enum(SuggestionCategory, entry['category'], 'layer_hierarchy'))
                for entry in patterns['layer_hierarchy']
            ]

            button_text = patterns['button_text']
            self.press_words = set(parse_word_list(button_text['press_words'], 'button_text.press_words'))
            self.button_text_max_length = int(button_text['max_length'])
            self.button_text_max_words = int(button_text['max_words'])
        except (KeyError, TypeError, ValueError, re.error) as e:
            raise MappingConfigError(f"Invalid layout patterns: {e}") from e

    @classmethod
    def from_config(cls, config_service: MappingConfigService) -> 'LayoutSuggester':
        return cls(config_service.get_layout_patterns())

    def suggest(self, match: AmbiguousMatch, analysis: ContextAnalysis) -> List[Suggestion]:
        layout = match.layout
        if layout is None:
            return []

        suggestions = []
        if layout.is_component and layout.component_name:
            suggestions.extend(self.analyze_component_name(layout.component_name, match.surrounding_text))
        suggestions.extend(self.analyze_parent_name(layout.parent_name))
        suggestions.extend(self.analyze_layer_hierarchy(layout))

        logger.debug(f"Layout stream for '{match.ambiguous_word.value}': {len(suggestions)} candidates")
        return suggestions

    def analyze_component_name(self, component_name: str, context: str) -> List[Suggestion]:
        suggestions = []
        name = component_name.lower()
        context_lower = context.lower()

        if _contains_any(name, self.button_markers) and _contains_any(context_lower, self.press_markers):
            for component in self.action_components:
                if _contains_any(name, component['markers']):
                    suggestions.append(Suggestion(component['text'], self.action_confidence, SuggestionCategory.ACTION))
                    break
            else:
                suggestions.append(Suggestion(
                    self.button_fallback['text'],
                    float(self.button_fallback['confidence']),
                    SuggestionCategory.UI_ELEMENT
                ))

        for component in self.element_components:
            if _contains_any(name, component['markers']):
                suggestions.append(Suggestion(component['text'], self.element_confidence, SuggestionCategory.UI_ELEMENT))

        return suggestions

    def analyze_parent_name(self, parent_name: str) -> List[Suggestion]:
        name = parent_name.lower()
        return [
            Suggestion(text, confidence, SuggestionCategory.UI_ELEMENT)
            for pattern, text, confidence in self.parent_patterns
            if pattern.search(name)
        ]

    def analyze_layer_hierarchy(self, layout: LayoutInfo) -> List[Suggestion]:
        hierarchy_text = ' '.join(layout.layer_hierarchy).lower()
        return [
            Suggestion(text, confidence, category)
            for markers, text, confidence, category in self.hierarchy_patterns
            if _contains_any(hierarchy_text, markers)
        ]

    def is_button_text(self, content: str, layout: Optional[LayoutInfo]) -> bool:
        """
        True for a short press label sitting inside a button.

        The button is recognised from the component or parent name; the label
        must be short, a few words without sentence punctuation, and contain a
        press word.
        """
        if layout is None:
            return False

        names = f"{layout.component_name or ''} {layout.parent_name}".lower()
        if not _contains_any(names, self.button_markers):
            return False

        text = content.strip()
        words = [word.strip('!?') for word in text.lower().split()]
        return (
            len(text) <= self.button_text_max_length
            and len(words) <= self.button_text_max_words
            and '.' not in text and ',' not in text
            and any(word in self.press_words for word in words)
        )


def _contains_any(text: str, markers: List[str]) -> bool:
    return any(marker in text for marker in markers)
