"""
Batch runner to classify the payee column of a CSV or Excel file without the API.

Usage:
  PYTHONPATH=. python run_batch_file.py \
    --input /path/to/vendors.csv \
    --column "Vendor Name" \
    --output results/vendors_classified.csv
"""

import argparse
import logging
from pathlib import Path

import pandas as pd

from payee_core.classification.engine import create_classification_engine
from payee_core.classification.export import export_summary_rows, to_dataframe
from payee_core.config import get_config
from payee_core.pipeline import BatchClassificationPipeline
from payee_core.utils.infrastructure.mlflow import mlflow_run

EXCEL_SUFFIXES = (".xlsx", ".xls")


def read_input(input_path: Path) -> pd.DataFrame:
    if input_path.suffix.lower() in EXCEL_SUFFIXES:
        return pd.read_excel(input_path)
    return pd.read_csv(input_path)


def write_output(df: pd.DataFrame, output_path: Path) -> None:
    output_path.parent.mkdir(exist_ok=True, parents=True)
    if output_path.suffix.lower() in EXCEL_SUFFIXES:
        df.to_excel(output_path, index=False)
    else:
        df.to_csv(output_path, index=False)


def process_file(
    input_path: Path,
    column: str,
    output_path: Path,
    offline: bool,
    max_workers: int,
    persist: bool,
    summary: bool,
):
    df = read_input(input_path)
    if column not in df.columns:
        raise ValueError(f"Column '{column}' not found. Available columns: {list(df.columns)}")

    # Rows go through as plain dicts so every original column is exported untouched
    rows = df.to_dict(orient="records")
    names = df[column].tolist()

    engine = create_classification_engine(offline_mode=True if offline else None)
    pipeline = BatchClassificationPipeline(
        engine=engine,
        max_workers=max_workers,
        persist_results=persist,
    )
    if persist:
        pipeline.warm_memory()

    print(f"Classifying {len(names)} payees from column '{column}'...")
    with mlflow_run(run_name=f"batch_{input_path.stem}"):
        batch_result = pipeline.process_batch(names, original_rows=rows)

    sic_lookup = None
    if pipeline.db_manager is not None:
        missing = [item.payee_name for item in batch_result.results if not item.result.sic_code]
        sic_lookup = pipeline.db_manager.get_sic_lookup(missing)

    if summary:
        result_df = pd.DataFrame(export_summary_rows(batch_result, sic_lookup))
    else:
        result_df = to_dataframe(batch_result, sic_lookup)
    write_output(result_df, output_path)

    stats = batch_result.enhanced_stats
    print(f"Done. {stats.total_processed} rows in {batch_result.processing_time:.1f}s")
    print(f"  Business:    {stats.business_count}")
    print(f"  Individual:  {stats.individual_count}")
    print(f"  Excluded:    {stats.excluded_count}")
    print(f"  Failed:      {stats.failed_count}")
    print(f"  Avg confidence: {stats.average_confidence}")
    print(f"  Tiers: {stats.tier_counts}")
    print(f"Output written to: {output_path}")


def main():
    config = get_config()
    parser = argparse.ArgumentParser(description="Batch runner for payee classification.")
    parser.add_argument("--input", required=True, help="Path to input CSV or Excel file")
    parser.add_argument("--column", required=True, help="Column holding the payee names")
    parser.add_argument("--output", default=None, help="Output path (.csv or .xlsx)")
    parser.add_argument("--offline", action="store_true", help="Skip the AI tier")
    parser.add_argument("--workers", type=int, default=None, help="Parallel workers")
    parser.add_argument("--no-persist", action="store_true", help="Do not store results in the database")
    parser.add_argument("--summary", action="store_true", help="Write the condensed summary view")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    output_path = (
        Path(args.output)
        if args.output
        else config.results_dir / f"{input_path.stem}_classified{input_path.suffix or '.csv'}"
    )

    process_file(
        input_path,
        args.column,
        output_path,
        offline=args.offline,
        max_workers=args.workers if args.workers is not None else config.classification.max_workers,
        persist=not args.no_persist,
        summary=args.summary,
    )


if __name__ == "__main__":
    main()
