"""
deadline_series.py
-------------------
Expands an accepted suggestion into the deadline documents of one year.

Mensile gives twelve deadlines on the estimated day; the longer cadences
start at the cycle's first month and step forward by their period. Dates
that fall outside the requested year are skipped, and the day is clamped
to the month's last day (giorno 31 in February → 28/29).

Writing the documents is the caller's job.
"""

import calendar
from datetime import date, datetime
from typing import Any, Dict, List

from core.formatting import format_month_year
from core.models import DeadlineSuggestion

# ricorrenza → (step in months, occurrences per year)
SERIES_PLAN = {
    "Mensile": (1, 12),
    "Bimestrale": (2, 6),
    "Trimestrale": (3, 4),
    "Quadrimestrale": (4, 3),
    "Semestrale": (6, 2),
    "Annuale": (12, 1),
}


def series_dates(ricorrenza: str, year: int, giorno: int, primo_mese: int = 1) -> List[date]:
    """
    Due dates of a recurring deadline inside `year`.

    Raises:
        ValueError: If the recurrence label has no series plan.
    """
    if ricorrenza not in SERIES_PLAN:
        raise ValueError(
            f"Unsupported recurrence '{ricorrenza}'. "
            f"Available: {list(SERIES_PLAN.keys())}"
        )

    step, count = SERIES_PLAN[ricorrenza]
    start = 1 if ricorrenza == "Mensile" else primo_mese

    dates = []
    for i in range(count):
        month = start + i * step
        if month > 12:
            # Past the end of the requested year
            continue
        last_day = calendar.monthrange(year, month)[1]
        dates.append(date(year, month, max(1, min(giorno, last_day))))
    return dates


def generate_deadline_series(
    suggestion: DeadlineSuggestion,
    year: int,
    created_by: str = "",
) -> List[Dict[str, Any]]:
    """
    Builds the deadline documents for an accepted suggestion.

    Args:
        suggestion: The accepted DeadlineSuggestion.
        year: Year to generate deadlines for.
        created_by: Optional user id stamped on every document.

    Returns:
        One dict per deadline, in due-date order.
    """
    now = datetime.now().isoformat(timespec="seconds")
    documents = []

    for due in series_dates(suggestion.ricorrenza, year, suggestion.giorno_stimato, suggestion.primo_mese):
        documents.append({
            "societa": suggestion.societa,
            "anno": due.year,
            "data_scadenza": due.strftime("%Y-%m-%d"),
            "descrizione": f"{suggestion.descrizione_pulita} - {format_month_year(due.month, due.year)}",
            "categoria": suggestion.categoria,
            "sottocategoria": suggestion.sottocategoria,
            "importo_previsto": suggestion.importo_previsto,
            "importo_pagato": 0.0,
            "stato": "Da pagare",
            "ricorrenza": suggestion.ricorrenza,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
            "source": "ai-suggested",
        })

    return documents
