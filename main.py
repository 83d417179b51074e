"""
main.py
--------
Entry point for the recurring deadline suggestion engine.

Reads exported movements (and optionally the current deadlines), runs the
suggestion pipeline, and writes output to the outputs/ folder.

Usage (from the project root):
    python main.py --input movimenti.csv

    # With optional arguments:
    python main.py --input movimenti.csv --deadlines scadenze.csv
    python main.py --input movimenti.csv --societa LNC --min-confidence Media
    python main.py --input movimenti.csv --series-year 2025
"""

import sys
import os
import argparse
import logging
import pandas as pd
from datetime import datetime

# Ensure project root is on path (for runs from any working directory)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from pipeline import DeadlineSuggestionPipeline
from core.deadline_series import generate_deadline_series
from core.deduplicator import find_similar_deadline
from core.formatting import format_currency


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("main")

TIER_ORDER = {"Alta": 3, "Media": 2, "Bassa": 1}


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Suggerimento scadenze: detect recurring outflows and propose deadlines."
    )
    parser.add_argument(
        "--input", type=str, required=True,
        help="Path to the movements CSV (columns: id, societa, data, descrizione, entrata, uscita)."
    )
    parser.add_argument(
        "--deadlines", type=str, default=None,
        help="Path to the existing deadlines CSV, used to skip already scheduled payments."
    )
    parser.add_argument(
        "--societa", type=str, default=None,
        help="Only analyse movements of this company code (e.g. LNC)."
    )
    parser.add_argument(
        "--min-confidence", type=str, default="Bassa",
        choices=["Alta", "Media", "Bassa"],
        help="Minimum confidence tier to include in output. Default: Bassa (everything)."
    )
    parser.add_argument(
        "--series-year", type=int, default=None,
        help="Also expand every suggestion into that year's deadlines."
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory. Defaults to outputs/ in project root."
    )
    return parser.parse_args(argv)


# =============================================================================
# MAIN
# =============================================================================

def main(argv: list[str] | None = None):
    args = parse_args(argv)

    output_dir = args.output_dir or os.path.join(PROJECT_ROOT, "outputs")
    os.makedirs(output_dir, exist_ok=True)

    # --- Load movements ---
    logger.info(f"Loading movements from: {args.input}")
    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)

    movements = pd.read_csv(args.input)
    if args.societa and "societa" in movements.columns:
        movements = movements[movements["societa"].astype(str).str.strip() == args.societa.strip()]
    logger.info(f"Loaded {len(movements):,} movements.")

    deadlines = None
    if args.deadlines:
        if not os.path.exists(args.deadlines):
            logger.error(f"Deadlines file not found: {args.deadlines}")
            sys.exit(1)
        deadlines = pd.read_csv(args.deadlines)
        logger.info(f"Loaded {len(deadlines):,} existing deadlines.")

    # --- Run pipeline ---
    pipeline = DeadlineSuggestionPipeline()
    suggestions = pipeline.suggest(movements, deadlines)

    # --- Apply confidence filter ---
    min_tier_value = TIER_ORDER[args.min_confidence]
    filtered = [s for s in suggestions if TIER_ORDER[s.confidenza] >= min_tier_value]
    logger.info(
        f"After filtering (>= {args.min_confidence}): {len(filtered):,} suggestions. "
        f"Filtered out: {len(suggestions) - len(filtered):,}."
    )

    # --- Warn about near-duplicates the exact check lets through ---
    if deadlines is not None:
        for s in filtered:
            similar = find_similar_deadline(s, deadlines)
            if similar is not None:
                logger.warning(
                    f"Possible duplicate: '{s.descrizione_pulita}' ({s.societa}, {s.ricorrenza}) "
                    f"looks like existing deadline '{similar.descrizione}'."
                )

    # --- Output: Suggestions ---
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    suggestions_path = os.path.join(output_dir, f"suggerimenti_{timestamp}.csv")
    pipeline.serialize(filtered).to_csv(suggestions_path, index=False)
    logger.info(f"Suggestions saved to: {suggestions_path}")

    # --- Optional: deadline series ---
    if args.series_year is not None:
        documents = []
        for s in filtered:
            documents.extend(generate_deadline_series(s, args.series_year))
        series_path = os.path.join(output_dir, f"scadenze_{args.series_year}_{timestamp}.csv")
        pd.DataFrame(documents).to_csv(series_path, index=False)
        logger.info(f"{len(documents):,} deadlines for {args.series_year} saved to: {series_path}")

    _print_summary(filtered)


def _print_summary(suggestions):
    """Prints a clean summary table to the console."""
    if not suggestions:
        print("\n  Nessun suggerimento da mostrare.\n")
        return

    print("\n" + "=" * 80)
    print("  SCADENZE SUGGERITE")
    print("=" * 80)

    for s in suggestions:
        print(
            f"  [{s.confidenza:5s}] {s.societa:5s} {s.descrizione_pulita[:34]:34s} "
            f"{s.ricorrenza:12s} {format_currency(s.importo_previsto):>14s}"
        )

    print(f"\n  Confidence Mix:")
    print("  " + "-" * 60)
    for tier in TIER_ORDER:
        count = sum(1 for s in suggestions if s.confidenza == tier)
        pct = count / len(suggestions) * 100
        print(f"    {tier:10s}  {count:>5,}  ({pct:.1f}%)")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    main()
