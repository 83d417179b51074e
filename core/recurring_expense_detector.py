"""
recurring_expense_detector.py
------------------------------
Recurring outflow detection engine.

This is the foundation layer. It does not score or categorize anything.
It only answers one question:

    "For this company + counterparty, is there a recurring payment cadence?"

Output: a RecurringExpenseGroup per qualifying group. These objects are
then consumed by the DeadlineInterpreter for classification and confidence
scoring.

Design decisions:
    - Grouping key is (societa, normalized description). Groups come out in
      the order their key first appears in the input.
    - Cadence is decided on the mean inter-payment gap against fixed bands.
      A mean outside every band drops the group; it is never forced onto the
      nearest label.
    - All thresholds and tolerances are read from config.yaml.
"""

import logging
from collections import Counter
from typing import Any, List

import numpy as np
import pandas as pd

from config.config_loader import get_recurring_detection_config
from core.models import DEFAULT_CATEGORY, RecurringExpenseGroup, SourceMovement
from core.normalizer import normalize_description
from core.records import parse_dates, to_amounts, to_frame

logger = logging.getLogger(__name__)

MOVEMENT_DEFAULTS = {
    "id": None,
    "societa": "",
    "data": None,
    "descrizione": "",
    "entrata": 0.0,
    "uscita": 0.0,
    "categoria": DEFAULT_CATEGORY,
    "sottocategoria": DEFAULT_CATEGORY,
    "scadenza_id": None,
}


class RecurringExpenseDetector:
    """
    Detects recurring outflow patterns in movement data.

    Usage:
        detector = RecurringExpenseDetector()
        groups = detector.detect(movements)
    """

    def __init__(self):
        self.config = get_recurring_detection_config()
        self.min_occurrences = self.config["min_occurrences"]
        self.cadence_bands = self.config["cadence_bands"]

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def detect(self, movements: Any) -> List[RecurringExpenseGroup]:
        """
        Run recurring outflow detection.

        Args:
            movements: DataFrame, list of dicts or list of Movimento with
                fields id, societa, data, descrizione, entrata, uscita.
                Missing fields are filled with defaults.

        Returns:
            List of RecurringExpenseGroup, one per qualifying
            (societa, description) group, in first-appearance order.
        """
        df = self.prepare(movements)

        if df.empty:
            return []

        grouped = df.groupby(["societa", "descrizione_normalizzata"], sort=False)
        results: List[RecurringExpenseGroup] = []

        for (societa, key), group in grouped:
            # Filter: minimum occurrences gate
            if len(group) < self.min_occurrences:
                continue

            reg = self._build_group(societa, key, group)
            if reg is not None:
                results.append(reg)

        return results

    # -------------------------------------------------------------------------
    # INTERNAL: DATA PREPARATION
    # -------------------------------------------------------------------------

    def prepare(self, movements: Any) -> pd.DataFrame:
        """
        Fills defaults, keeps outflows only and drops malformed records.

        A record with an unparseable date or an empty description is
        skipped on its own, as is an item that is not a record at all
        (None, a bare string); the rest of the batch proceeds.
        """
        df = to_frame(movements, MOVEMENT_DEFAULTS)
        unreadable = df.attrs.get("skipped_records", 0)
        if df.empty:
            self._log_skipped(unreadable, [])
            return df

        missing_ids = df["id"].isna()
        df["id"] = df["id"].astype(object)
        df.loc[missing_ids, "id"] = df.index[missing_ids].astype(str)
        df["id"] = df["id"].astype(str)

        df["societa"] = df["societa"].astype(str).str.strip()
        df["entrata"] = to_amounts(df["entrata"])
        df["uscita"] = to_amounts(df["uscita"])

        # Outflows only
        df = df[df["uscita"] > 0].copy()
        if df.empty:
            self._log_skipped(unreadable, [])
            return df

        df["data"] = parse_dates(df["data"])
        df["descrizione"] = df["descrizione"].map(lambda d: d if isinstance(d, str) else "")
        df["descrizione_normalizzata"] = df["descrizione"].map(normalize_description)

        malformed = df["data"].isna() | (df["descrizione_normalizzata"] == "")
        self._log_skipped(unreadable, df.loc[malformed, "id"].tolist())
        return df[~malformed].copy()

    @staticmethod
    def _log_skipped(unreadable: int, malformed_ids: list[str]) -> None:
        total = unreadable + len(malformed_ids)
        if total:
            logger.warning(
                f"Skipping {total} malformed movement(s) "
                f"(not a record, missing/invalid date or empty description): "
                f"ids={malformed_ids}, unreadable={unreadable}"
            )

    # -------------------------------------------------------------------------
    # INTERNAL: GROUP CONSTRUCTION
    # -------------------------------------------------------------------------

    def _build_group(self, societa: str, key: str, group: pd.DataFrame) -> RecurringExpenseGroup | None:
        """
        Builds a RecurringExpenseGroup from a single (societa, description) group.

        Returns None if the mean gap falls outside every cadence band.
        """
        # Stable sort keeps input order for same-day payments
        group = group.sort_values("data", kind="mergesort")
        dates = group["data"]

        intervals = [int(d) for d in dates.diff().dt.days.iloc[1:]]
        mean_interval = float(np.mean(intervals))

        ricorrenza = self._classify_cadence(mean_interval)
        if ricorrenza is None:
            logger.debug(
                f"Dropping '{key}' ({societa}): mean interval {mean_interval:.1f} days "
                f"matches no cadence band."
            )
            return None

        band = self.cadence_bands[ricorrenza]
        in_band = sum(1 for gap in intervals if self._in_band(gap, band))
        consistency = in_band / len(intervals)

        first_seen = dates.iloc[0]
        return RecurringExpenseGroup(
            societa=societa,
            descrizione_normalizzata=key,
            descrizione_originale=str(group["descrizione"].iloc[0]),
            ricorrenza=ricorrenza,
            intervals=intervals,
            mean_interval=round(mean_interval, 2),
            consistency_ratio=consistency,
            amounts=[float(a) for a in group["uscita"]],
            first_seen=first_seen.to_pydatetime(),
            last_seen=dates.iloc[-1].to_pydatetime(),
            giorno_stimato=self._most_common_day(dates),
            primo_mese=((first_seen.month - 1) % band["step_months"]) + 1,
            movimenti=[
                SourceMovement(id=row.id, data=row.data.strftime("%Y-%m-%d"), importo=float(row.uscita))
                for row in group.itertuples(index=False)
            ],
        )

    # -------------------------------------------------------------------------
    # INTERNAL: CADENCE DETECTION
    # -------------------------------------------------------------------------

    def _classify_cadence(self, mean_interval: float) -> str | None:
        """Returns the first band label containing the mean gap, or None."""
        for label, band in self.cadence_bands.items():
            if self._in_band(mean_interval, band):
                return label
        return None

    @staticmethod
    def _in_band(gap: float, band: dict) -> bool:
        return band["min_gap_days"] < gap < band["max_gap_days"]

    @staticmethod
    def _most_common_day(dates: pd.Series) -> int:
        """Most common day of month; ties go to the earliest payment's day."""
        counter = Counter(d.day for d in dates)
        return max(counter, key=counter.get)
