"""Tests for the prompt classification policy."""

import pytest

from relay_agent.pipeline.catalog import DEFAULT_CATALOG, PromptPatternCatalog
from relay_agent.pipeline.classifier import PromptClassifier, classify
from relay_agent.pipeline.extraction import build_prompt
from relay_agent.pipeline.types import ClassifiedPrompt, DecisionOutcome, OutcomeKind


@pytest.fixture
def classifier():
    return PromptClassifier()


def _classify(text: str) -> DecisionOutcome:
    return classify(build_prompt(text))


class TestClassifyScenarios:
    def test_claude_md_prompt_is_approved(self):
        prompt = build_prompt("Do you want to create a CLAUDE.md file? [y/n]")
        assert classify(prompt) == DecisionOutcome.YES
        assert prompt.possible_responses == ("y", "n")

    def test_clear_settings_is_declined(self):
        assert _classify("Clear all settings? [y/n]") == DecisionOutcome.NO

    def test_delete_file_escalates(self):
        assert _classify("Delete file server.js? [y/n]") == DecisionOutcome.ABORT

    def test_api_key_escalates(self):
        assert _classify("Enter your API key:") == DecisionOutcome.ABORT

    @pytest.mark.parametrize(
        "text",
        [
            "Do you want to create a CLAUDE.md file? [y/n]",
            "Would you like me to commit these changes? (y/n)",
            "Do you want me to add comments to this code? [y/n]",
            "Do you want to see more examples? [y/n]",
            "Start a new session? [y/n]",
        ],
    )
    def test_safe_prompts_are_approved(self, text):
        assert _classify(text) == DecisionOutcome.YES

    @pytest.mark.parametrize(
        "text",
        [
            "Delete file server.js? [y/n]",
            "Remove file config.json? [y/n]",
            "Force push to remote repository? [y/n]",
            "Enter your API key:",
            "Please provide your password:",
            "Authentication token required:",
            "Overwrite existing file? [y/n]",
        ],
    )
    def test_sensitive_prompts_escalate(self, text):
        assert _classify(text) == DecisionOutcome.ABORT


class TestClassifyPriority:
    def test_require_user_beats_auto_approve(self):
        text = "Would you like me to commit these changes including the secret? [y/n]"
        assert _classify(text) == DecisionOutcome.ABORT

    def test_critical_impact_beats_auto_approve(self):
        prompt = ClassifiedPrompt(
            text="Start a new session?", critical_impact=True
        )
        assert classify(prompt) == DecisionOutcome.ABORT

    def test_critical_vocabulary_beats_auto_decline(self):
        # "permanent" is critical, "erase" alone would decline
        assert _classify("Erase history permanently? [y/n]") == DecisionOutcome.ABORT

    def test_auto_decline_without_critical_words(self):
        assert _classify("Erase cached results? [y/n]") == DecisionOutcome.NO

    def test_auto_approve_beats_auto_decline(self):
        text = "Start a new session and clear all settings? [y/n]"
        assert _classify(text) == DecisionOutcome.YES

    def test_matching_is_case_insensitive(self):
        assert _classify("DO YOU WANT TO SEE MORE EXAMPLES? [Y/N]") == DecisionOutcome.YES
        assert _classify("ENTER YOUR PASSWORD") == DecisionOutcome.ABORT

    def test_unknown_prompt_fails_closed(self):
        assert _classify("Do you want to continue? [y/n]") == DecisionOutcome.ABORT
        assert _classify("") == DecisionOutcome.ABORT

    def test_critical_flag_is_respected_as_given(self):
        prompt = ClassifiedPrompt(text="Clear all settings?", critical_impact=False)
        assert classify(prompt) == DecisionOutcome.NO


class TestPromptClassifier:
    def test_is_idempotent(self, classifier):
        prompt = build_prompt("Would you like me to commit these changes? (y/n)")
        first = classifier.classify(prompt)
        second = classifier.classify(prompt)
        assert first == second == DecisionOutcome.YES

    def test_uses_injected_catalog(self):
        catalog = PromptPatternCatalog(
            require_user_patterns=(),
            auto_approve_patterns=("install dependencies",),
            auto_decline_patterns=(),
            critical_vocabulary=(),
        )
        prompt = build_prompt("Install dependencies? [y/n]", catalog=catalog)
        assert PromptClassifier(catalog).classify(prompt) == DecisionOutcome.YES
        assert PromptClassifier(DEFAULT_CATALOG).classify(prompt) == DecisionOutcome.ABORT

    def test_never_produces_custom(self, classifier):
        for text in ("Start a new session?", "erase?", "token?", "anything"):
            outcome = classifier.classify(build_prompt(text))
            assert outcome.kind != OutcomeKind.CUSTOM


class TestDecisionOutcome:
    def test_custom_has_structural_equality(self):
        assert DecisionOutcome.custom("2") == DecisionOutcome.custom("2")
        assert DecisionOutcome.custom("2") != DecisionOutcome.custom("3")
        assert DecisionOutcome.custom("y") != DecisionOutcome.YES

    def test_only_abort_is_not_automatic(self):
        assert DecisionOutcome.YES.is_automatic
        assert DecisionOutcome.NO.is_automatic
        assert DecisionOutcome.custom("1").is_automatic
        assert not DecisionOutcome.ABORT.is_automatic

    def test_str(self):
        assert str(DecisionOutcome.YES) == "yes"
        assert str(DecisionOutcome.custom("skip")) == "custom(skip)"
