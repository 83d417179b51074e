"""
deduplicator.py
----------------
Drops suggestions that an existing deadline already covers, and ranks the
survivors.

A suggestion is a duplicate when a non-cancelled deadline has exactly the
same normalized description, company and recurrence. No fuzzy matching
happens here; find_similar_deadline() is the softer, advisory check used
before a user accepts a suggestion.
"""

import logging
from typing import Any, List, Optional

from config.config_loader import get_confidence_tiers, get_deduplication_config
from core.models import DeadlineSuggestion, Scadenza
from core.normalizer import normalize_description
from core.records import to_frame

logger = logging.getLogger(__name__)

DEADLINE_DEFAULTS = {
    "id": "",
    "societa": "",
    "descrizione": "",
    "ricorrenza": "Nessuna",
    "data_scadenza": "",
    "stato": "Da pagare",
}


def load_deadlines(deadlines: Any) -> List[Scadenza]:
    """Boundary conversion of deadlines to Scadenza with defaults filled."""
    df = to_frame(deadlines, DEADLINE_DEFAULTS)
    if df.attrs.get("skipped_records"):
        logger.warning(f"Skipping {df.attrs['skipped_records']} unreadable deadline record(s).")
    return [
        Scadenza(
            id=str(row["id"]),
            societa=str(row["societa"]).strip(),
            descrizione=str(row["descrizione"]),
            ricorrenza=str(row["ricorrenza"]),
            data_scadenza=str(row["data_scadenza"]),
            stato=str(row["stato"]),
        )
        for row in df[list(DEADLINE_DEFAULTS)].to_dict("records")
    ]


class Deduplicator:
    """
    Exact-match filter against existing deadlines.

    Usage:
        dedup = Deduplicator(existing_deadlines)
        unique = dedup.filter(suggestions)
    """

    def __init__(self, deadlines: Any = None):
        self.cancelled_states = set(get_deduplication_config()["cancelled_states"])
        self.deadlines = [d for d in load_deadlines(deadlines) if d.stato not in self.cancelled_states]
        self._keys = {
            (normalize_description(d.descrizione), d.societa, d.ricorrenza)
            for d in self.deadlines
        }

    def is_duplicate(self, suggestion: DeadlineSuggestion) -> bool:
        key = (normalize_description(suggestion.descrizione_pulita), suggestion.societa, suggestion.ricorrenza)
        return key in self._keys

    def filter(self, suggestions: List[DeadlineSuggestion]) -> List[DeadlineSuggestion]:
        """Returns the suggestions not already scheduled, order preserved."""
        kept = []
        for s in suggestions:
            if self.is_duplicate(s):
                logger.debug(f"Dropping '{s.descrizione_pulita}' ({s.societa}, {s.ricorrenza}): already scheduled.")
                continue
            kept.append(s)
        return kept


def rank_suggestions(suggestions: List[DeadlineSuggestion]) -> List[DeadlineSuggestion]:
    """
    Sorts by confidence tier, highest first.

    sorted() is stable, so same-tier suggestions keep their discovery order.
    """
    tier_rank = {tier: rank for rank, tier in enumerate(get_confidence_tiers())}
    return sorted(suggestions, key=lambda s: tier_rank.get(s.confidenza, len(tier_rank)))


def find_similar_deadline(suggestion: DeadlineSuggestion, deadlines: Any) -> Optional[Scadenza]:
    """
    Returns the first deadline that probably covers the same payment.

    Same company and recurrence, and one normalized description contains
    the other ("pagamento f24" vs "pagamento f24 gennaio 2025"). Cancelled
    deadlines are ignored. Advisory only: nothing is filtered.
    """
    cancelled = set(get_deduplication_config()["cancelled_states"])
    target = normalize_description(suggestion.descrizione_pulita)
    if not target:
        return None

    for deadline in load_deadlines(deadlines):
        if deadline.stato in cancelled:
            continue
        if deadline.societa != suggestion.societa or deadline.ricorrenza != suggestion.ricorrenza:
            continue
        existing = normalize_description(deadline.descrizione)
        if existing and (target in existing or existing in target):
            return deadline
    return None
