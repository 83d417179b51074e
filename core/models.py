"""
models.py
----------
Core domain models. These are the typed contracts between engine layers.

- Movimento / Scadenza: read-only inputs, field names follow the
  application's document schema.

- RecurringExpenseGroup: Output of the detection layer. One per
  (societa, normalized description) group with a recognised cadence.

- DeadlineSuggestion: Output of the interpreter. What gets shown to a
  user for accept/reject, with confidence tier and evidence references.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


DEFAULT_CATEGORY = "Da categorizzare"


@dataclass(frozen=True)
class Movimento:
    """A booked transaction. Exactly one of entrata/uscita is non-zero."""

    id: str
    societa: str
    data: str                        # ISO date, "YYYY-MM-DD"
    descrizione: str
    entrata: float = 0.0
    uscita: float = 0.0
    categoria: str = DEFAULT_CATEGORY
    sottocategoria: str = DEFAULT_CATEGORY
    scadenza_id: Optional[str] = None


@dataclass(frozen=True)
class Scadenza:
    """A scheduled deadline. Only used for deduplication here."""

    id: str
    societa: str
    descrizione: str
    ricorrenza: str                  # "Nessuna" | "Mensile" | "Trimestrale" | ...
    data_scadenza: str = ""
    stato: str = "Da pagare"         # "Da pagare" | "Pagato" | "Parziale" | "Annullato"


@dataclass(frozen=True)
class SourceMovement:
    """Evidence reference back to a transaction that produced a suggestion."""

    id: str
    data: str
    importo: float


@dataclass
class RecurringExpenseGroup:
    """
    Recurring outflow pattern for one (societa, description) group.

    Produced by RecurringExpenseDetector for each group that meets the
    minimum occurrence count and falls inside a cadence band.
    """

    # Identity
    societa: str
    descrizione_normalizzata: str
    descrizione_originale: str       # Description of the earliest transaction

    # Cadence
    ricorrenza: str                  # "Mensile" | "Trimestrale" | "Annuale"
    intervals: list[int]             # Day gaps between consecutive payments
    mean_interval: float
    consistency_ratio: float         # Share of intervals inside the band. 0.0 – 1.0

    # Amounts (date order)
    amounts: list[float]

    # Timing
    first_seen: datetime
    last_seen: datetime
    giorno_stimato: int              # Most common day of month
    primo_mese: int                  # First month of the cycle, 1 – 12

    # Evidence
    movimenti: list[SourceMovement] = field(default_factory=list)

    @property
    def occurrence_count(self) -> int:
        return len(self.amounts)


@dataclass
class DeadlineSuggestion:
    """
    Interpreter output. One per surviving recurring group.

    Ephemeral: the caller decides whether to persist, discard, or present
    it for acceptance.
    """

    societa: str
    descrizione_pulita: str
    categoria: str
    sottocategoria: str
    ricorrenza: str
    importo_previsto: float          # Mean amount, rounded to cents
    confidenza: str                  # "Alta" | "Media" | "Bassa"
    punteggio: int                   # Raw score 0 – 6
    ragione: str
    tipo_importo: str                # "fixed" | "variable"
    giorno_stimato: int
    primo_mese: int
    occorrenze: int
    intervallo_medio: float
    movimenti_origine: list[SourceMovement] = field(default_factory=list)
