"""
Suggestion Generator

Produces a ranked list of concrete replacement phrases for an ambiguous
referring expression. Several independently weighted streams feed one
deduplicated, confidence-ordered list:

    layout -> context patterns -> contextual (element hints, action hints,
    context type) -> generic

The extended route also merges the rule engine and the weighted knowledge
base, between the contextual and generic streams.
"""

import dataclasses
import logging
import threading
from typing import Dict, Any, Iterable, List, Optional, Union

from config import Config

from .base_suggester import ContextClassifier
from .knowledge_base import SuggestionDatabase
from .quality import evaluate_suggestion_quality
from .ranking import rank_suggestions
from .rule_engine import RuleEngine, SuggestionRule
from .services.mapping_config_service import MappingConfigService
from .suggesters import (
    ContextPatternSuggester, ContextualSuggester, GenericSuggester, LayoutSuggester
)
from .types import (
    AmbiguousMatch, AmbiguousWord, ContextAnalysis, DetectionResult,
    ProcessingStatus, Suggestion, TextUnit
)

logger = logging.getLogger(__name__)


class SuggestionGenerator:
    """
    Suggestion engine for one editing session or service.

    Owns its knowledge base and rule list; nothing is shared between
    instances. A re-entrant lock serializes rule insertion and weight updates
    against rule matching and database search, so one instance can serve
    concurrent callers.
    """

    def __init__(self,
                 config: Optional[Dict[str, Any]] = None,
                 classifier: Optional[ContextClassifier] = None,
                 config_service: Optional[MappingConfigService] = None):
        settings = Config.get_suggestion_config()
        settings.update(config or {})

        self.learning_increment = float(settings['learning_increment'])
        if self.learning_increment < 0.0:
            raise ValueError("learning_increment must not be negative")
        self.enable_extended_suggestions = bool(settings['enable_extended_suggestions'])
        self.strict_rule_override = bool(settings['strict_rule_override'])
        self.max_suggestions = int(settings['max_suggestions'])
        self.detection_result_suggestions = int(settings['detection_result_suggestions'])

        self.classifier = classifier
        self.config_service = config_service or MappingConfigService(settings['config_dir'])

        self._lock = threading.RLock()
        self._custom_rules: List[SuggestionRule] = []
        self._build_components()

        logger.info(
            f"Suggestion engine ready: {len(self.rule_engine.rules)} rules, "
            f"extended={self.enable_extended_suggestions}, strict_rules={self.strict_rule_override}"
        )

    def _build_components(self) -> None:
        """Build every stream, the rule engine and the knowledge base from the YAML tables."""
        layout_suggester = LayoutSuggester.from_config(self.config_service)
        context_pattern_suggester = ContextPatternSuggester.from_config(self.config_service)
        contextual_suggester = ContextualSuggester.from_config(self.config_service)
        generic_suggester = GenericSuggester.from_config(self.config_service)
        rule_engine = RuleEngine.from_config(self.config_service)
        database = SuggestionDatabase.from_config(self.config_service)

        for rule in self._custom_rules:
            rule_engine.add_custom_rule(rule)

        self.layout_suggester = layout_suggester
        self.context_pattern_suggester = context_pattern_suggester
        self.contextual_suggester = contextual_suggester
        self.generic_suggester = generic_suggester
        self.rule_engine = rule_engine
        self.database = database

    def reload_config(self) -> None:
        """
        Re-read the YAML tables and rebuild the engine's components.

        Custom rules are carried over. Learned weights are not: the knowledge
        base restarts from the reloaded seed weights, so take a snapshot first
        if they matter. A broken table raises MappingConfigError and leaves
        the current components in place.
        """
        with self._lock:
            self.config_service.reload_all()
            self._build_components()
        logger.info(f"Suggestion tables reloaded from {self.config_service.config_dir}")

    # === GENERATION ===

    def generate_suggestions(self, match: AmbiguousMatch,
                             analysis: Optional[ContextAnalysis] = None) -> List[Suggestion]:
        """
        Ranked replacement candidates for one match.

        Args:
            match: The ambiguous expression and its surroundings
            analysis: Context classification; the classifier is consulted when omitted

        Returns:
            Candidates sorted by descending confidence, unique by replacement text.
            An empty list means no confident alternative.
        """
        if self.enable_extended_suggestions:
            return self.generate_extended_suggestions(match, analysis)

        analysis = self._resolve_analysis(match, analysis)
        return rank_suggestions(
            self.layout_suggester.suggest(match, analysis),
            self.context_pattern_suggester.suggest(match, analysis),
            self.contextual_suggester.suggest(match, analysis),
            self.generic_suggester.suggest(match, analysis),
            limit=self.max_suggestions
        )

    def generate_extended_suggestions(self, match: AmbiguousMatch,
                                      analysis: Optional[ContextAnalysis] = None) -> List[Suggestion]:
        """Default streams plus rule-engine and knowledge-base candidates, ranked together."""
        analysis = self._resolve_analysis(match, analysis)
        context = match.surrounding_text

        with self._lock:
            rule_suggestions = self.rule_engine.generate(context, first_match_only=self.strict_rule_override)
            database_suggestions = self.database.search(match.ambiguous_word, context)

        return rank_suggestions(
            self.layout_suggester.suggest(match, analysis),
            self.context_pattern_suggester.suggest(match, analysis),
            self.contextual_suggester.suggest(match, analysis),
            rule_suggestions,
            database_suggestions,
            self.generic_suggester.suggest(match, analysis),
            limit=self.max_suggestions
        )

    def search_database(self, ambiguous_word: AmbiguousWord, context: str) -> List[Suggestion]:
        """Knowledge-base candidates only, unranked."""
        with self._lock:
            return self.database.search(ambiguous_word, context)

    def _resolve_analysis(self, match: AmbiguousMatch,
                          analysis: Optional[ContextAnalysis]) -> ContextAnalysis:
        if analysis is not None:
            return analysis
        if self.classifier is not None:
            return self.classifier.analyze_context(match)
        return ContextAnalysis.empty()

    # === RULES ===

    def add_custom_rule(self, rule: SuggestionRule) -> None:
        """Add a rule to the rule engine. Raises InvalidRuleError for a malformed rule."""
        with self._lock:
            self.rule_engine.add_custom_rule(rule)
            self._custom_rules.append(rule)
        logger.info(f"Added custom rule with priority {rule.priority} ({len(self.rule_engine.rules)} rules)")

    # === QUALITY ===

    def evaluate_suggestion_quality(self, suggestion: Suggestion, context: str) -> float:
        return evaluate_suggestion_quality(suggestion, context)

    # === LEARNING ===

    def learn_from_usage(self, ambiguous_word: Union[AmbiguousWord, str],
                         selected_text: str, context: str) -> None:
        """Reinforce the knowledge-base entries matching an accepted suggestion."""
        word = _coerce_word(ambiguous_word)
        if word is None:
            logger.debug(f"Ignoring usage for unknown ambiguous word '{ambiguous_word}'")
            return

        logger.info(f"Learning: '{word.value}' -> '{selected_text}' (context: {context[:50]}...)")
        with self._lock:
            found = self.database.adjust_weight(word, selected_text, self.learning_increment)
        if not found:
            logger.debug(f"No knowledge-base entry for '{selected_text}' under '{word.value}'")

    def snapshot_knowledge_base(self) -> Dict[str, Any]:
        with self._lock:
            return self.database.snapshot()

    def restore_knowledge_base(self, snapshot: Dict[str, Any]) -> None:
        with self._lock:
            self.database.restore(snapshot)
        logger.info("Knowledge base restored from snapshot")

    # === DOCUMENT WORKFLOW ===

    def process_text_unit(self, unit: TextUnit, matches: Iterable[AmbiguousMatch]) -> List[DetectionResult]:
        """
        Build one pending DetectionResult per match found in a text unit.

        The unit's layout is attached to matches that do not carry one, each
        result keeps the top suggestions only, and short press labels inside
        buttons are flagged for whole-text replacement. Blank units produce
        nothing.
        """
        if not unit.content or not unit.content.strip():
            return []

        results = []
        for match in matches:
            if match.layout is None and unit.layout is not None:
                match = dataclasses.replace(match, layout=unit.layout)

            suggestions = self.generate_suggestions(match)
            if self.detection_result_suggestions > 0:
                suggestions = suggestions[:self.detection_result_suggestions]

            results.append(DetectionResult(
                id=f"{unit.id}-{match.start_index}",
                unit_id=unit.id,
                original_text=unit.content,
                match=match,
                location=unit.location,
                suggestions=suggestions,
                is_button_text=self.layout_suggester.is_button_text(unit.content, match.layout),
            ))

        logger.debug(f"Text unit {unit.id}: {len(results)} ambiguous expressions")
        return results

    def accept_suggestion(self, result: DetectionResult, selected_text: str) -> str:
        """
        Apply an accepted suggestion and feed the choice back into the knowledge base.

        Button labels are replaced whole; any other text only has the matched
        span replaced.

        Returns:
            The text unit's new content
        """
        match = result.match
        if result.is_button_text:
            new_content = selected_text
        else:
            content = result.original_text
            new_content = content[:match.start_index] + selected_text + content[match.end_index:]

        result.status = ProcessingStatus.REPLACED
        self.learn_from_usage(match.ambiguous_word, selected_text, match.surrounding_text)
        logger.debug(f"Result {result.id} replaced: '{result.original_text}' -> '{new_content}'")
        return new_content

    def skip_detection(self, result: DetectionResult) -> None:
        result.status = ProcessingStatus.SKIPPED


def _coerce_word(word: Union[AmbiguousWord, str]) -> Optional[AmbiguousWord]:
    if isinstance(word, AmbiguousWord):
        return word
    try:
        return AmbiguousWord.from_value(str(word))
    except ValueError:
        return None
