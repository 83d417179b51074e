"""
pipeline.py
------------
Main orchestration layer. Wires together:
    1. RecurringExpenseDetector  →  produces RecurringExpenseGroups
    2. DeadlineInterpreter       →  scores groups into DeadlineSuggestions
    3. Deduplicator              →  drops already-scheduled deadlines, ranks
    4. Output serialization      →  flat DataFrame for CSV export

This is the single entry point for running the engine. Everything else
is internal machinery.

Usage:
    from pipeline import suggest_deadlines

    result = suggest_deadlines(movements, existing_deadlines)
    for suggestion in result["suggestions"]:
        ...
"""

import pandas as pd
import logging
from typing import Any, Dict, List

from core.models import DeadlineSuggestion, RecurringExpenseGroup
from core.recurring_expense_detector import RecurringExpenseDetector
from core.deduplicator import Deduplicator, rank_suggestions
from interpreters.deadline_interpreter import DeadlineInterpreter

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = [
    "societa", "descrizione_pulita", "categoria", "sottocategoria",
    "ricorrenza", "importo_previsto", "confidenza", "punteggio",
    "tipo_importo", "giorno_stimato", "primo_mese", "occorrenze",
    "intervallo_medio", "ragione", "movimenti_origine",
]


class DeadlineSuggestionPipeline:
    """
    End-to-end deadline suggestion pipeline.

    Stateless between runs: every call works on its own copies of the
    inputs and returns fresh suggestions.
    """

    def __init__(self):
        self.detector = RecurringExpenseDetector()
        self.interpreter = DeadlineInterpreter()

        logger.info(
            f"Pipeline initialized. "
            f"Cadences: {list(self.detector.cadence_bands)}. "
            f"Keyword rules: {len(self.interpreter.classifier)}. "
            f"Min occurrences: {self.detector.min_occurrences}."
        )

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def suggest(self, movements: Any, existing_deadlines: Any = None) -> List[DeadlineSuggestion]:
        """
        Run the full suggestion pipeline.

        Args:
            movements: Movements (DataFrame, dicts or Movimento).
            existing_deadlines: Deadlines (DataFrame, dicts or Scadenza) used
                for deduplication. None means no existing deadlines.

        Returns:
            Suggestions, highest confidence first.
        """
        if hasattr(movements, "__len__"):
            logger.info(f"Pipeline starting. Input: {len(movements):,} movements.")

        # --- Stage 1: Recurring outflow detection ---
        groups = self.detector.detect(movements)
        logger.info(f"Stage 1 complete. Recurring groups: {len(groups):,}.")

        # --- Stage 2: Scoring ---
        candidates = [self.interpreter.interpret(g) for g in groups]
        logger.info(f"Stage 2 complete. Candidates: {len(candidates):,}.")

        # --- Stage 3: Deduplication & ranking ---
        unique = Deduplicator(existing_deadlines).filter(candidates)
        ranked = rank_suggestions(unique)
        logger.info(
            f"Pipeline complete. Suggestions: {len(ranked):,} "
            f"({len(candidates) - len(unique):,} already scheduled)."
        )

        return ranked

    def run(self, movements: Any, existing_deadlines: Any = None) -> pd.DataFrame:
        """Runs suggest() and serializes the result to a DataFrame."""
        return self.serialize(self.suggest(movements, existing_deadlines))

    def run_detection_only(self, movements: Any) -> List[RecurringExpenseGroup]:
        """
        Run only Stage 1 (recurring outflow detection). Useful for debugging
        why a payment series produced no suggestion.
        """
        return self.detector.detect(movements)

    # -------------------------------------------------------------------------
    # OUTPUT SERIALIZATION
    # -------------------------------------------------------------------------

    @staticmethod
    def serialize(suggestions: List[DeadlineSuggestion]) -> pd.DataFrame:
        """One row per suggestion; source refs joined as "id@date:amount|..."."""
        if not suggestions:
            return pd.DataFrame(columns=OUTPUT_COLUMNS)

        rows = []
        for s in suggestions:
            rows.append({
                "societa": s.societa,
                "descrizione_pulita": s.descrizione_pulita,
                "categoria": s.categoria,
                "sottocategoria": s.sottocategoria,
                "ricorrenza": s.ricorrenza,
                "importo_previsto": s.importo_previsto,
                "confidenza": s.confidenza,
                "punteggio": s.punteggio,
                "tipo_importo": s.tipo_importo,
                "giorno_stimato": s.giorno_stimato,
                "primo_mese": s.primo_mese,
                "occorrenze": s.occorrenze,
                "intervallo_medio": s.intervallo_medio,
                "ragione": s.ragione,
                "movimenti_origine": "|".join(f"{m.id}@{m.data}:{m.importo:.2f}" for m in s.movimenti_origine),
            })

        # Already ranked; no re-sort so same-tier order survives
        return pd.DataFrame(rows, columns=OUTPUT_COLUMNS)


def suggest_deadlines(movements: Any, existing_deadlines: Any = None) -> Dict[str, List[DeadlineSuggestion]]:
    """
    Library entry point.

    Returns:
        {"suggestions": [DeadlineSuggestion, ...]}, highest confidence first.
    """
    return {"suggestions": DeadlineSuggestionPipeline().suggest(movements, existing_deadlines)}
