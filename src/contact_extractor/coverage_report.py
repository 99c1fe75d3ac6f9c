import argparse
import csv
import logging
import os
from typing import Any, Dict, List

import pandas as pd

from .common import ContactRecord, load_config, warn_missing
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)


def pct(n, d):
    return round((n / d * 100.0), 2) if d else 0.0


def field_coverage(df: pd.DataFrame) -> pd.DataFrame:
    """Filled count and percentage per contact field; missing columns count as empty."""
    total = len(df)
    records: List[Dict[str, Any]] = []
    for field_name in ContactRecord.FIELDS:
        if field_name in df.columns:
            filled = int(sum(1 for value in df[field_name] if str(value or "").strip()))
        else:
            filled = 0
        records.append(
            {
                "field": field_name,
                "filled": filled,
                "total": total,
                "filled_pct": pct(filled, total),
            }
        )
    return pd.DataFrame(records, columns=["field", "filled", "total", "filled_pct"])


def main():
    parser = argparse.ArgumentParser(description="Summarize per-field fill rates of extracted contacts.")
    parser.add_argument("--config", type=str, default=None)
    parser.add_argument("--contacts-csv", type=str, default=None)
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--log-level", type=str, default=None, help="Override logging level")

    args = parser.parse_args()
    config = load_config(args)
    configure_logging(config, level_override=args.log_level)

    out_dir = str(config.outputs.dir)
    contacts_csv = args.contacts_csv or os.path.join(out_dir, "extracted_contacts.csv")
    if warn_missing(contacts_csv, "Extracted contacts CSV"):
        return 1
    df = pd.read_csv(contacts_csv, dtype=str, keep_default_na=False, quoting=csv.QUOTE_ALL)

    coverage_df = field_coverage(df)
    os.makedirs(out_dir, exist_ok=True)
    out_coverage = os.path.join(out_dir, "extraction_coverage.csv")
    coverage_df.to_csv(out_coverage, index=False, encoding="utf-8", quoting=csv.QUOTE_ALL)

    logger.info(
        "Coverage over %d texts: %s",
        len(df),
        ", ".join(f"{row.field}={row.filled_pct}%" for row in coverage_df.itertuples()),
    )
    print(f"Saved: {out_coverage}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
