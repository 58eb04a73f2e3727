"""
Suggestion Database

In-memory, weighted knowledge base of replacement phrases:
category -> element/action type -> ambiguous word -> entries.
Weights are the only mutable field and only learning feedback changes them.
"""

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Set, Tuple, Union

from .errors import MappingConfigError
from .services.mapping_config_service import MappingConfigService, parse_enum, parse_word_list
from .types import (
    AmbiguousWord, ActionType, ElementType, Suggestion, SuggestionCategory,
    clamp_confidence
)

logger = logging.getLogger(__name__)

# Whitespace and sentence punctuation.
TOKEN_SPLIT_PATTERN = re.compile(r"[\s,.!?;:、。！？]+")


@dataclass
class KnowledgeEntry:
    """A known replacement phrase with its learned weight."""
    text: str
    weight: float
    context_keywords: Tuple[str, ...] = ()


@dataclass
class TypeSection:
    """Knowledge for one element or action type, gated by its patterns."""
    patterns: List[str] = field(default_factory=list)
    suggestions: Dict[AmbiguousWord, List[KnowledgeEntry]] = field(default_factory=dict)

    def matches(self, context: str) -> bool:
        context_lower = context.lower()
        return any(pattern in context_lower for pattern in self.patterns)


class SuggestionDatabase:
    """
    Weighted knowledge base with three sections: ui_elements, actions and generic.

    Search scores each entry as
    weight + KEYWORD_MATCH_BONUS * (overlapping context keywords) + category bonus,
    clamped to 1.0. The UI-element and action sections only contribute when one
    of their patterns occurs in the context; the generic section always does.
    """

    KEYWORD_MATCH_BONUS = 0.1
    UI_ELEMENT_BONUS = 0.1
    ACTION_BONUS = 0.05

    def __init__(self,
                 ui_elements: Dict[ElementType, TypeSection],
                 actions: Dict[ActionType, TypeSection],
                 generic: Dict[AmbiguousWord, List[KnowledgeEntry]],
                 stop_words: Optional[Set[str]] = None):
        self.ui_elements = ui_elements
        self.actions = actions
        self.generic = generic
        self.stop_words = set(stop_words or ())

    @classmethod
    def from_config(cls, config_service: MappingConfigService) -> 'SuggestionDatabase':
        """Build the database from the knowledge_base.yaml seed."""
        raw = config_service.get_knowledge_base()
        ui_elements = {
            parse_enum(ElementType, tag, 'ui_elements'): _parse_type_section(data, f"ui_elements.{tag}")
            for tag, data in raw['ui_elements'].items()
        }
        actions = {
            parse_enum(ActionType, tag, 'actions'): _parse_type_section(data, f"actions.{tag}")
            for tag, data in raw['actions'].items()
        }
        generic = _parse_entry_table(raw['generic'], 'generic')
        return cls(ui_elements, actions, generic, config_service.get_stop_words())

    # === SEARCH ===

    def search(self, ambiguous_word: AmbiguousWord, context: str) -> List[Suggestion]:
        """Score every reachable entry for the word against the context."""
        suggestions = []
        context_words = self.extract_context_words(context)

        for section in self.ui_elements.values():
            if section.matches(context):
                suggestions.extend(self._score_entries(
                    section.suggestions.get(ambiguous_word, []),
                    context_words,
                    SuggestionCategory.UI_ELEMENT,
                    self.UI_ELEMENT_BONUS
                ))

        for section in self.actions.values():
            if section.matches(context):
                suggestions.extend(self._score_entries(
                    section.suggestions.get(ambiguous_word, []),
                    context_words,
                    SuggestionCategory.ACTION,
                    self.ACTION_BONUS
                ))

        suggestions.extend(self._score_entries(
            self.generic.get(ambiguous_word, []),
            context_words,
            SuggestionCategory.GENERIC,
            0.0
        ))

        return suggestions

    def extract_context_words(self, context: str) -> List[str]:
        """Split the context on whitespace and sentence punctuation, dropping stop words."""
        return [
            word for word in TOKEN_SPLIT_PATTERN.split(context.lower())
            if word and word not in self.stop_words
        ]

    def _score_entries(self, entries: List[KnowledgeEntry], context_words: List[str],
                       category: SuggestionCategory, category_bonus: float) -> List[Suggestion]:
        scored = []
        for entry in entries:
            keyword_matches = [
                keyword for keyword in entry.context_keywords
                if any(word in keyword or keyword in word for word in context_words)
            ]
            confidence = entry.weight + len(keyword_matches) * self.KEYWORD_MATCH_BONUS + category_bonus
            scored.append(Suggestion(
                replacement_text=entry.text,
                confidence=clamp_confidence(confidence),
                category=category
            ))
        return scored

    # === LEARNING ===

    def adjust_weight(self, ambiguous_word: AmbiguousWord, text: str, adjustment: float) -> int:
        """
        Raise the weight of every entry for the word whose text equals `text`.

        All sections are visited, not only the first hit. Weights are capped
        at 1.0 and never lowered.

        Returns:
            Number of entries that were found (including ones already at 1.0)
        """
        found = 0
        for entries in self._entry_lists_for(ambiguous_word):
            for entry in entries:
                if entry.text == text:
                    entry.weight = min(entry.weight + max(adjustment, 0.0), 1.0)
                    found += 1
        return found

    def _entry_lists_for(self, ambiguous_word: AmbiguousWord) -> List[List[KnowledgeEntry]]:
        lists = []
        if ambiguous_word in self.generic:
            lists.append(self.generic[ambiguous_word])
        for section in list(self.ui_elements.values()) + list(self.actions.values()):
            if ambiguous_word in section.suggestions:
                lists.append(section.suggestions[ambiguous_word])
        return lists

    def get_entries(self, ambiguous_word: AmbiguousWord) -> List[KnowledgeEntry]:
        """Every entry known for the word, across all sections."""
        return [entry for entries in self._entry_lists_for(ambiguous_word) for entry in entries]

    # === SNAPSHOTS ===

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of the weighted tables."""
        return {
            'ui_elements': copy.deepcopy(self.ui_elements),
            'actions': copy.deepcopy(self.actions),
            'generic': copy.deepcopy(self.generic),
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        """Replace the weighted tables with a copy of a snapshot."""
        self.ui_elements = copy.deepcopy(snapshot['ui_elements'])
        self.actions = copy.deepcopy(snapshot['actions'])
        self.generic = copy.deepcopy(snapshot['generic'])


def _parse_type_section(data: Union[Dict[str, Any], None], section_name: str) -> TypeSection:
    if not isinstance(data, dict):
        raise MappingConfigError(f"{section_name} must be a mapping")
    patterns = parse_word_list(data.get('patterns') or [], f"{section_name}.patterns")
    if not patterns:
        raise MappingConfigError(f"{section_name} needs at least one pattern")
    return TypeSection(
        patterns=patterns,
        suggestions=_parse_entry_table(data.get('suggestions') or {}, f"{section_name}.suggestions")
    )


def _parse_entry_table(table: Dict[str, Any], section_name: str) -> Dict[AmbiguousWord, List[KnowledgeEntry]]:
    if not isinstance(table, dict):
        raise MappingConfigError(f"{section_name} must be a mapping of ambiguous word to entries")

    parsed = {}
    for word_tag, entries in table.items():
        word = parse_enum(AmbiguousWord, word_tag, section_name)
        parsed[word] = [_parse_entry(entry, f"{section_name}.{word_tag}") for entry in entries or []]
    return parsed


def _parse_entry(data: Dict[str, Any], section_name: str) -> KnowledgeEntry:
    text = str(data.get('text', '')).strip()
    if not text:
        raise MappingConfigError(f"{section_name}: entry without text")
    try:
        weight = float(data.get('weight', 0.0))
    except (TypeError, ValueError):
        raise MappingConfigError(f"{section_name}: weight of '{text}' is not a number") from None
    if not 0.0 <= weight <= 1.0:
        raise MappingConfigError(f"{section_name}: weight of '{text}' must be between 0.0 and 1.0")
    keywords = tuple(parse_word_list(data.get('context') or [], f"{section_name}: context of '{text}'"))
    return KnowledgeEntry(text=text, weight=weight, context_keywords=keywords)
