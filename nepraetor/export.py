"""
Export Module - Tabular output of processed frames.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Union

import pandas as pd

from .analysis.result import ViewResult

logger = logging.getLogger(__name__)


CSV_COLUMNS = ["Frame", "IsDummy", "Points", "OverheadCount", "SideCount", "BackCount"]


def results_to_dataframe(results: Iterable[ViewResult]) -> pd.DataFrame:
    """
    One row per frame, ordered by frame number.

    Args:
        results: ViewResults in any order

    Returns:
        DataFrame with CSV_COLUMNS
    """
    rows: List[list] = []
    for result in sorted(results, key=lambda r: r.frame_number):
        counts = result.view_reference_counts
        rows.append([
            result.frame_number,
            result.is_dummy,
            result.points,
            counts["Overhead"],
            counts["Side"],
            counts["Back"],
        ])
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def export_results_csv(results: Iterable[ViewResult], path: Union[str, Path]) -> Path:
    """
    Write results as CSV.

    Args:
        results: ViewResults to export
        path: Output file

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = results_to_dataframe(results)
    df.to_csv(path, index=False)
    logger.info(f"Exported {len(df)} frames to {path}")
    return path


def format_summary(results: Iterable[ViewResult]) -> str:
    """
    Short human readable summary, one "<frame> -> yes|no" line per frame.

    "yes" marks a dummy frame.
    """
    return "\n".join(
        f"{r.frame_number} -> {'yes' if r.is_dummy else 'no'}"
        for r in sorted(results, key=lambda r: r.frame_number)
    )
