"""
keyword_classifier.py
----------------------
Keyword rule lookup layer.

Loads the keyword_rules table from config.yaml and matches a normalized
description against it. Rules are checked in table order and the first rule
whose keywords intersect the description's tokens wins.

Rule updates happen in config.yaml; no code changes required.
"""

from dataclasses import dataclass

from config.config_loader import get_keyword_rules
from core.models import DEFAULT_CATEGORY
from core.normalizer import normalize_description, tokenize


@dataclass(frozen=True)
class KeywordRule:
    keywords: frozenset[str]
    categoria: str
    sottocategoria: str


@dataclass(frozen=True)
class KeywordMatch:
    categoria: str
    sottocategoria: str
    matched: bool


UNMATCHED = KeywordMatch(categoria=DEFAULT_CATEGORY, sottocategoria=DEFAULT_CATEGORY, matched=False)


class KeywordClassifier:
    """
    Ordered (keywords → categoria, sottocategoria) lookup.

    Built once at init from the config rule table. Thread-safe for reads.
    """

    def __init__(self, rules: list[dict] | None = None):
        self._rules: list[KeywordRule] = []
        self._load_rules(rules if rules is not None else get_keyword_rules())

    def _load_rules(self, rules: list[dict]) -> None:
        for entry in rules:
            # Keywords go through the same normalization as descriptions
            keywords = frozenset(normalize_description(k) for k in entry["keywords"]) - {""}
            self._rules.append(KeywordRule(keywords, entry["categoria"], entry["sottocategoria"]))

    def classify(self, normalized_description: str) -> KeywordMatch:
        """
        Classify a normalized description.

        Returns:
            KeywordMatch of the first matching rule, or UNMATCHED
            ("Da categorizzare"/"Da categorizzare").
        """
        tokens = tokenize(normalized_description)
        for rule in self._rules:
            if rule.keywords & tokens:
                return KeywordMatch(
                    categoria=rule.categoria,
                    sottocategoria=rule.sottocategoria,
                    matched=True,
                )
        return UNMATCHED

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"KeywordClassifier(rules={len(self)})"
