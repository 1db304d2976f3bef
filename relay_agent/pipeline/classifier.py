"""Prompt classification policy."""

from relay_agent.pipeline.catalog import DEFAULT_CATALOG, PromptPatternCatalog
from relay_agent.pipeline.types import ClassifiedPrompt, DecisionOutcome


def classify(
    prompt: ClassifiedPrompt, catalog: PromptPatternCatalog = DEFAULT_CATALOG
) -> DecisionOutcome:
    """Decide how to answer a prompt.

    Checks run in a fixed order and the first match wins. Anything not
    explicitly recognised escalates to the user.

    Args:
        prompt: The captured prompt.
        catalog: Pattern groups to match against.

    Returns:
        The decision outcome. Never raises.
    """
    text = prompt.text
    if catalog.matches_require_user(text):
        return DecisionOutcome.ABORT
    if prompt.critical_impact:
        return DecisionOutcome.ABORT
    if catalog.matches_auto_approve(text):
        return DecisionOutcome.YES
    if catalog.matches_auto_decline(text):
        return DecisionOutcome.NO
    return DecisionOutcome.ABORT


class PromptClassifier:
    """Binds a catalog to the classification policy."""

    def __init__(self, catalog: PromptPatternCatalog = DEFAULT_CATALOG) -> None:
        self.catalog = catalog

    def classify(self, prompt: ClassifiedPrompt) -> DecisionOutcome:
        return classify(prompt, self.catalog)
