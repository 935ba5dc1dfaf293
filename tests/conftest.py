\
from typing import List

import pytest

from dolint.core.engine import check_text
from dolint.core.loader import discover_rules
from dolint.core.models import RuleConfig, Violation


@pytest.fixture(scope="session")
def all_rules():
    return discover_rules()


@pytest.fixture()
def lint(all_rules):
    """Check a snippet; keyword arguments become RuleConfig fields."""

    def _lint(text: str, **config) -> List[Violation]:
        if "enabled_rules" in config:
            config["enabled_rules"] = frozenset(config["enabled_rules"])
        return check_text(text, RuleConfig(**config), all_rules)

    return _lint


def rule_ids(violations: List[Violation]) -> List[str]:
    return [v.rule_id for v in violations]
