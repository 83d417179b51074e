"""
deadline_interpreter.py
------------------------
Turns a RecurringExpenseGroup into a DeadlineSuggestion.

Scoring is a flat additive rule set, not a probability. Each signal
dimension contributes a small integer sub-score:

    periodicity     2 if enough single gaps sit in the band, else 1
    amount          1 if the amount is stable (range / mean < 15%)
    keyword         2 if a keyword rule matched the description
    evidence        1 if the group has at least 4 payments

The total (0–6) maps to a confidence tier. Weights, tier floors and rules
come from config.yaml; only the scoring structure lives in code.
"""

from core.amount_stability import AmountStability, assess_amount_stability
from core.formatting import format_currency
from core.keyword_classifier import KeywordClassifier, KeywordMatch
from core.models import DeadlineSuggestion, RecurringExpenseGroup
from config.config_loader import (
    get_confidence_tiers,
    get_recurring_detection_config,
    get_scoring_config,
)


class DeadlineInterpreter:
    """
    Scores and describes recurring groups.

    Usage:
        interpreter = DeadlineInterpreter()
        suggestion = interpreter.interpret(group)
    """

    def __init__(self, classifier: KeywordClassifier | None = None):
        self.classifier = classifier if classifier is not None else KeywordClassifier()
        self.weights = get_scoring_config()
        self.tier_floors = get_confidence_tiers()
        detection = get_recurring_detection_config()
        self.consistency_ratio = detection["consistency_ratio"]
        self.evidence_occurrences = detection["evidence_bonus_occurrences"]

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def interpret(self, group: RecurringExpenseGroup) -> DeadlineSuggestion:
        """Builds the suggestion for one recurring group."""
        stability = assess_amount_stability(group.amounts)
        match = self.classifier.classify(group.descrizione_normalizzata)

        score = self.compute_score(group, stability, match)

        return DeadlineSuggestion(
            societa=group.societa,
            descrizione_pulita=group.descrizione_normalizzata.capitalize(),
            categoria=match.categoria,
            sottocategoria=match.sottocategoria,
            ricorrenza=group.ricorrenza,
            importo_previsto=round(stability.mean, 2),
            confidenza=self.assign_tier(score),
            punteggio=score,
            ragione=self._build_reason(group, stability, match),
            tipo_importo="fixed" if stability.is_fixed else "variable",
            giorno_stimato=group.giorno_stimato,
            primo_mese=group.primo_mese,
            occorrenze=group.occurrence_count,
            intervallo_medio=group.mean_interval,
            movimenti_origine=list(group.movimenti),
        )

    def compute_score(self, group: RecurringExpenseGroup, stability: AmountStability, match: KeywordMatch) -> int:
        """Sum of the four sub-scores."""
        w = self.weights

        periodicity = (
            w["periodicity_strong"]
            if group.consistency_ratio >= self.consistency_ratio
            else w["periodicity_weak"]
        )
        amount = w["amount_stable"] if stability.is_stable else 0
        keyword = w["keyword_match"] if match.matched else 0
        evidence = w["evidence_bonus"] if group.occurrence_count >= self.evidence_occurrences else 0

        return periodicity + amount + keyword + evidence

    def assign_tier(self, score: int) -> str:
        """Maps a score to the highest tier whose floor it reaches."""
        for tier_name, floor in self.tier_floors.items():
            if score >= floor:
                return tier_name
        # Below every floor: lowest tier
        return list(self.tier_floors)[-1]

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    @staticmethod
    def _build_reason(group: RecurringExpenseGroup, stability: AmountStability, match: KeywordMatch) -> str:
        aggettivo = "stabile" if stability.is_stable else "variabile"
        reason = (
            f"Trovati {group.occurrence_count} pagamenti con ricorrenza {group.ricorrenza.lower()}, "
            f"importo {aggettivo} (media {format_currency(stability.mean)})"
        )
        if match.matched:
            reason += f", categoria {match.categoria}"
        return reason + "."
