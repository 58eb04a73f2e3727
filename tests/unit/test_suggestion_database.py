"""
Tests for the weighted suggestion database: search scoring, tokenization,
weight adjustment and snapshots.
"""

import pytest

from ambiguity.knowledge_base import KnowledgeEntry, SuggestionDatabase, TypeSection
from ambiguity.services.mapping_config_service import MappingConfigService
from ambiguity.types import AmbiguousWord, ElementType, SuggestionCategory


@pytest.fixture
def database():
    """Database seeded from the packaged knowledge_base.yaml"""
    return SuggestionDatabase.from_config(MappingConfigService())


def by_text(suggestions):
    return {s.replacement_text: s for s in suggestions}


class TestTokenization:
    """Context splitting and stop-word removal"""

    def test_stop_words_and_punctuation_are_dropped(self, database):
        """Punctuation splits tokens; functional words never reach keyword matching"""
        words = database.extract_context_words("Save the file, and close it.")
        assert words == ["save", "file", "close"]

    def test_empty_context(self, database):
        """An empty context yields no tokens"""
        assert database.extract_context_words("") == []

    def test_on_is_a_stop_word(self, database):
        """'on' loads as a word, not as the YAML boolean True"""
        assert "on" in database.stop_words
        assert "true" not in database.stop_words
        assert database.extract_context_words("Tap on that one") == ["tap", "that", "one"]

    def test_stop_word_does_not_inflate_scores(self, database):
        """
        'on' would otherwise overlap keywords such as 'content' by substring

        Expected: generic 'this content' keeps its bare 0.6 weight
        """
        scored = by_text(database.search(AmbiguousWord.THIS_ONE, "Tap on it"))
        assert scored["this content"].confidence == pytest.approx(0.6)


class TestUIElementSearch:
    """Pattern-gated UI-element sections"""

    def test_button_section_scores(self, database):
        """Weight, keyword overlap and the UI bonus add up and clamp at 1.0"""
        suggestions = database.search(AmbiguousWord.THIS_ONE, "Click the button to continue")
        scored = by_text(suggestions)

        # 0.9 weight + one keyword (click) + 0.1 bonus, clamped
        assert scored["this button"].confidence == pytest.approx(1.0)
        assert scored["submit button"].confidence == pytest.approx(0.9)
        assert scored["confirm button"].confidence == pytest.approx(0.9)
        assert scored["button"].confidence == pytest.approx(0.8)
        assert scored["this button"].category == SuggestionCategory.UI_ELEMENT

    def test_keyword_overlap_raises_score(self, database):
        """Each overlapping context keyword adds 0.1"""
        scored = by_text(database.search(AmbiguousWord.THIS_ONE, "Open the main page"))

        assert scored["main page"].confidence == pytest.approx(0.9)
        assert scored["current page"].confidence == pytest.approx(0.9)
        assert scored["page"].confidence == pytest.approx(0.7)

    def test_keyword_contained_in_context_token(self, database):
        """Overlap is a substring match in either direction"""
        scored = by_text(database.search(AmbiguousWord.THAT_ONE, "See the listing page"))
        # "list" occurs inside "listing"
        assert scored["list page"].confidence == pytest.approx(0.9)

    def test_pattern_gate_blocks_unrelated_sections(self, database):
        """Without a section pattern in the context only the generic section contributes"""
        suggestions = database.search(AmbiguousWord.THIS_ONE, "nothing relevant here")

        assert all(s.category == SuggestionCategory.GENERIC for s in suggestions)
        assert [s.confidence for s in suggestions] == pytest.approx([0.6, 0.6, 0.6, 0.5, 0.5])


class TestActionSearch:
    """Pattern-gated action sections"""

    def test_delete_section_bonus(self, database):
        """Action entries get the 0.05 action bonus"""
        scored = by_text(database.search(AmbiguousWord.THAT_ONE, "Delete the file now"))

        assert scored["that item"].confidence == pytest.approx(0.95)
        assert scored["that item"].category == SuggestionCategory.ACTION
        assert scored["history"].confidence == pytest.approx(0.85)
        assert scored["settings"].confidence == pytest.approx(0.75)

    def test_sections_are_concatenated_ui_action_generic(self, database):
        """Results keep section order: UI elements, then actions, then generic"""
        suggestions = database.search(AmbiguousWord.THIS_ONE, "Click to delete")
        categories = [s.category for s in suggestions]

        first_action = categories.index(SuggestionCategory.ACTION)
        first_generic = categories.index(SuggestionCategory.GENERIC)
        assert all(c == SuggestionCategory.UI_ELEMENT for c in categories[:first_action])
        assert first_action < first_generic


class TestUnknownWords:
    """Words without entries and score bounds"""

    def test_word_without_entries(self, database):
        """A word absent from every section yields nothing"""
        assert database.search(AmbiguousWord.OVER_THERE, "Click the button over there") == []

    def test_scores_stay_in_bounds(self, database):
        """Keyword-heavy contexts never push a score past 1.0"""
        context = "click press select button page screen save delete data content item"
        for word in AmbiguousWord:
            for suggestion in database.search(word, context):
                assert 0.0 <= suggestion.confidence <= 1.0


class TestWeightAdjustment:
    """Learning feedback on stored weights"""

    def test_all_sections_are_adjusted(self, database):
        """Every entry with the selected text is raised, not only the first"""
        found = database.adjust_weight(AmbiguousWord.THIS_ONE, "this item", 0.05)
        weights = [e.weight for e in database.get_entries(AmbiguousWord.THIS_ONE) if e.text == "this item"]

        assert found == 2
        assert sorted(weights) == pytest.approx([0.65, 0.95])

    def test_weight_is_capped(self, database):
        """Weights stop at 1.0"""
        for _ in range(10):
            database.adjust_weight(AmbiguousWord.THIS_ONE, "this button", 0.05)

        entry = next(e for e in database.get_entries(AmbiguousWord.THIS_ONE) if e.text == "this button")
        assert entry.weight == 1.0

    def test_missing_entry_is_a_no_op(self, database):
        """Unknown phrases change nothing and report zero matches"""
        before = [e.weight for e in database.get_entries(AmbiguousWord.THAT_ONE)]
        assert database.adjust_weight(AmbiguousWord.THAT_ONE, "no such phrase", 0.05) == 0
        assert [e.weight for e in database.get_entries(AmbiguousWord.THAT_ONE)] == before


class TestSnapshots:
    """In-memory snapshot and restore"""

    def test_restore_undoes_learning(self, database):
        """Restoring a snapshot brings back the earlier weights"""
        snapshot = database.snapshot()
        database.adjust_weight(AmbiguousWord.THIS_ONE, "this item", 0.3)
        database.restore(snapshot)

        weights = sorted(e.weight for e in database.get_entries(AmbiguousWord.THIS_ONE) if e.text == "this item")
        assert weights == pytest.approx([0.6, 0.9])

    def test_snapshot_is_independent(self, database):
        """Later learning does not leak into a taken snapshot"""
        snapshot = database.snapshot()
        database.adjust_weight(AmbiguousWord.THIS_ONE, "this item", 0.3)

        assert snapshot['generic'][AmbiguousWord.THIS_ONE][0].weight == pytest.approx(0.6)


class TestHandBuiltDatabase:
    """Databases assembled in code rather than from YAML"""

    def test_constructor_accepts_typed_sections(self):
        """Typed sections score the same way as loaded ones"""
        database = SuggestionDatabase(
            ui_elements={
                ElementType.IMAGE: TypeSection(
                    patterns=["photo"],
                    suggestions={AmbiguousWord.THIS_ONE: [KnowledgeEntry("this photo", 0.5, ("photo",))]},
                )
            },
            actions={},
            generic={},
        )
        scored = by_text(database.search(AmbiguousWord.THIS_ONE, "Crop the photo"))

        # 0.5 weight + photo keyword + UI bonus
        assert scored["this photo"].confidence == pytest.approx(0.7)
