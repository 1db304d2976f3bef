"""Tests for prompt extraction from terminal output."""

import pytest

from relay_agent.pipeline.catalog import PromptPatternCatalog
from relay_agent.pipeline.extraction import (
    PromptDetector,
    build_prompt,
    extract_new_content,
    extract_possible_responses,
    infer_source_context,
    last_non_empty_line,
)
from relay_agent.pipeline.types import SourceContext


@pytest.fixture
def detector():
    return PromptDetector()


class TestLastNonEmptyLine:
    def test_skips_trailing_blank_lines(self):
        assert last_non_empty_line("a\nb\n\n   \n") == "b"

    def test_empty_buffer(self):
        assert last_non_empty_line("") == ""
        assert last_non_empty_line("\n\n") == ""


class TestPossibleResponses:
    def test_square_brackets(self):
        assert extract_possible_responses("Continue? [y/n]") == ("y", "n")

    def test_parentheses(self):
        assert extract_possible_responses("Pick one (1 / 2 / 3)") == ("1", "2", "3")

    def test_brackets_take_precedence(self):
        assert extract_possible_responses("Save (file) now? [yes/no]") == ("yes", "no")

    def test_single_option(self):
        assert extract_possible_responses("Press [Enter]") == ("Enter",)

    def test_no_options(self):
        assert extract_possible_responses("Enter your API key:") == ()


class TestSourceContext:
    @pytest.mark.parametrize(
        ("buffer", "expected"),
        [
            ("$ claude init\nDo you want to ...", SourceContext.INITIALIZATION),
            ("$ claude commit\nWould you like ...", SourceContext.GIT_COMMIT),
            ("> /review\nProceed with ...", SourceContext.CODE_REVIEW),
            ("> /doctor\nAre you sure?", SourceContext.DIAGNOSTICS),
            ("$ ls\nAre you sure?", SourceContext.GENERAL),
        ],
    )
    def test_infer(self, buffer, expected):
        assert infer_source_context(buffer) == expected

    def test_first_marker_wins(self):
        assert infer_source_context("/doctor\nclaude init") == SourceContext.INITIALIZATION


class TestBuildPrompt:
    def test_sets_critical_impact(self):
        assert build_prompt("Remove the cache? [y/n]").critical_impact is True
        assert build_prompt("Force reinstall? [y/n]").critical_impact is True
        assert build_prompt("Start a new session? [y/n]").critical_impact is False

    def test_uses_catalog_vocabulary(self):
        catalog = PromptPatternCatalog(critical_vocabulary=("drop",))
        assert build_prompt("Drop table? [y/n]", catalog=catalog).critical_impact is True
        assert build_prompt("Delete it? [y/n]", catalog=catalog).critical_impact is False


class TestPromptDetector:
    def test_detects_prompt_on_last_line(self, detector):
        buffer = "$ claude init\nScanning project...\nDo you want to create a CLAUDE.md file? [y/n]\n"
        prompt = detector.detect(buffer)
        assert prompt is not None
        assert prompt.text == "Do you want to create a CLAUDE.md file? [y/n]"
        assert prompt.source_context == SourceContext.INITIALIZATION
        assert prompt.possible_responses == ("y", "n")

    def test_ignores_prompt_not_on_last_line(self, detector):
        assert detector.detect("Are you sure? [y/n]\nDone.") is None

    def test_non_prompt_returns_none(self, detector):
        assert detector.detect("total 0\ndrwxr-xr-x  2 user staff") is None
        assert detector.detect("") is None

    def test_escalation_triggers_are_prompts(self, detector):
        for line in (
            "Enter your API key:",
            "Please provide your password:",
            "Authentication token required:",
        ):
            assert detector.detect(line) is not None

    def test_triggers_are_case_sensitive(self, detector):
        assert detector.detect("do you want to continue") is None

    def test_custom_triggers(self):
        detector = PromptDetector(triggers=("Overwrite?",))
        assert detector.detect("Overwrite? ") is not None
        assert detector.detect("Are you sure? [y/n]") is None


class TestExtractNewContent:
    def test_appended_content(self):
        assert extract_new_content("a\nb\n", "a\nb\nc\n") == "c\n"

    def test_diverging_content(self):
        assert extract_new_content("a\nb\nc", "a\nx\ny") == "x\ny"

    def test_unchanged_content(self):
        assert extract_new_content("a\nb", "a\nb") == ""

    def test_first_capture(self):
        assert extract_new_content("", "hello") == "hello"
