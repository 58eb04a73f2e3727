"""
End-to-end scenarios for the suggestion engine.

Covers the behaviour editors rely on: fallback coverage for every
ambiguous word, first-seen deduplication, ranking order, confidence bounds
under repeated learning, and rule ordering under insertion.
"""

import shutil
from pathlib import Path

import pytest
import yaml

from ambiguity import (
    AmbiguousMatch, AmbiguousWord, ContextAnalysis, ContextType, ElementType,
    SourceLocation, Suggestion, SuggestionCategory, SuggestionGenerator,
    SuggestionRule, UIElementHint, rank_suggestions
)
from config import TestingConfig

PACKAGE_CONFIG_DIR = Path(__file__).resolve().parents[1] / "ambiguity" / "config"


@pytest.fixture
def generator():
    return SuggestionGenerator(config=TestingConfig.get_suggestion_config())


def make_match(word, text=""):
    return AmbiguousMatch(
        ambiguous_word=word,
        location=SourceLocation(unit_id="48:2", page_name="Onboarding", layer_name="Body", x=16, y=320),
        surrounding_text=text,
    )


class TestEmptyAnalysis:
    """With no hints and a GENERIC context only the word-level tables fire."""

    @pytest.mark.parametrize("word", list(AmbiguousWord))
    def test_every_word_gets_fallback_suggestions(self, generator, word):
        """Each ambiguous word has at least one candidate"""
        suggestions = generator.generate_suggestions(make_match(word), ContextAnalysis.empty())

        assert suggestions
        assert all(s.confidence <= 0.6 for s in suggestions)
        assert {s.category for s in suggestions} <= {SuggestionCategory.CONTENT, SuggestionCategory.GENERIC}

    def test_that_one_without_hints(self, generator):
        analysis = ContextAnalysis(context_type=ContextType.GENERIC)
        suggestions = generator.generate_suggestions(make_match(AmbiguousWord.THAT_ONE), analysis)

        generic_row = {"that item", "that element", "that part", "that content"}
        assert generic_row <= {s.replacement_text for s in suggestions}
        assert not any(s.category in (SuggestionCategory.UI_ELEMENT, SuggestionCategory.ACTION)
                       for s in suggestions)
        # Only the GENERIC-context row and the word-level fallback contribute
        assert [s.replacement_text for s in suggestions if s.category == SuggestionCategory.GENERIC] == ["that feature"]


class TestButtonHint:
    """A confident button hint dominates the ranking"""

    def test_top_result_is_the_button_mapping(self, generator):
        """Expected: 'this button' at 0.8, categorized as a UI element"""
        analysis = ContextAnalysis(
            context_type=ContextType.UI_ACTION,
            ui_element_hints=(UIElementHint(ElementType.BUTTON, 1.0),),
            action_hints=(),
        )
        suggestions = generator.generate_suggestions(make_match(AmbiguousWord.THIS_ONE), analysis)

        top = suggestions[0]
        assert top.replacement_text == "this button"
        assert top.confidence == pytest.approx(0.8)
        assert top.category == SuggestionCategory.UI_ELEMENT


class TestDeduplicationAndRanking:
    """Merged output is unique and ordered"""

    def test_first_seen_stream_wins(self):
        """The earlier stream keeps its copy of a shared phrase"""
        ranked = rank_suggestions(
            [Suggestion("this button", 0.48, SuggestionCategory.UI_ELEMENT)],
            [Suggestion("this button", 0.6, SuggestionCategory.CONTENT)],
            [Suggestion("this item", 0.4, SuggestionCategory.GENERIC)],
        )
        assert [(s.replacement_text, s.category) for s in ranked] == [
            ("this button", SuggestionCategory.UI_ELEMENT),
            ("this item", SuggestionCategory.GENERIC),
        ]

    @pytest.mark.parametrize("context_type", list(ContextType))
    @pytest.mark.parametrize("hint_confidence", [0.0, 0.35, 0.9, 1.0])
    def test_output_is_non_increasing(self, generator, context_type, hint_confidence):
        analysis = ContextAnalysis(
            context_type=context_type,
            ui_element_hints=(UIElementHint(ElementType.FILE, hint_confidence),),
        )
        suggestions = generator.generate_suggestions(make_match(AmbiguousWord.THAT_ONE_OVER_THERE), analysis)
        confidences = [s.confidence for s in suggestions]

        assert all(a >= b for a, b in zip(confidences, confidences[1:]))


class TestConfidenceBounds:
    """Scores stay within [0, 1]"""

    def test_bounds_hold_after_heavy_learning(self):
        """Repeated learning saturates at 1.0"""
        settings = TestingConfig.get_suggestion_config()
        settings['enable_extended_suggestions'] = True
        generator = SuggestionGenerator(config=settings)
        context = "Click the button to save and delete this item content data page"

        for entry in generator.database.get_entries(AmbiguousWord.THIS_ONE):
            for _ in range(30):
                generator.learn_from_usage(AmbiguousWord.THIS_ONE, entry.text, context)

        assert all(e.weight <= 1.0 for e in generator.database.get_entries(AmbiguousWord.THIS_ONE))
        for suggestion in generator.generate_suggestions(make_match(AmbiguousWord.THIS_ONE, context)):
            assert 0.0 <= suggestion.confidence <= 1.0


class TestUnknownWord:
    """Words without any table entry"""

    def test_word_absent_from_every_table(self, tmp_path):
        """A word missing from every table yields an empty list, not an error"""
        config_dir = tmp_path / "config"
        shutil.copytree(PACKAGE_CONFIG_DIR, config_dir)
        mappings_path = config_dir / "contextual_mappings.yaml"
        with open(mappings_path, 'r', encoding='utf-8') as f:
            mappings = yaml.safe_load(f)
        mappings['generic'].pop('over-there')
        with open(mappings_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(mappings, f)

        settings = TestingConfig.get_suggestion_config()
        settings['config_dir'] = str(config_dir)
        generator = SuggestionGenerator(config=settings)

        assert generator.generate_suggestions(make_match(AmbiguousWord.OVER_THERE), ContextAnalysis.empty()) == []
        assert generator.generate_extended_suggestions(
            make_match(AmbiguousWord.OVER_THERE, "Click over there"), ContextAnalysis.empty()
        ) != []  # rules still fire on the context


class TestRuleOrdering:
    """Rule priority order survives custom insertions"""

    def test_list_stays_sorted_through_insertions(self, generator):
        def priorities():
            return [rule.priority for rule in generator.rule_engine.rules]

        assert priorities() == sorted(priorities(), reverse=True)

        for priority, pattern in [(0.8, "upload"), (0.6, "download")]:
            generator.add_custom_rule(SuggestionRule(
                pattern=pattern, suggestions=(f"{pattern} button",), priority=priority,
                category=SuggestionCategory.UI_ELEMENT,
            ))
            assert priorities() == sorted(priorities(), reverse=True)
