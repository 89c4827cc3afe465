"""
Row bug filters for variant matrices.

This module removes matrix rows whose annotation (the row label) carries one
of the known annotation pipeline bugs. Bugs are checked in a fixed order and
each pass only sees the rows that survived the previous one:

    1. warning             - label contains 'WARNING'
    2. pipe_count          - pipe count is not a multiple of 9 per gene segment
    3. chr_end             - label still reports 'CHR_END'
    4. missing_locus_info  - NULL locus tag or 'No Strand Information found'
    5. none_annotation     - label contains 'None'

Every removed label is recorded as a RemovedRow in a log sink that is returned
to the caller, who decides whether to persist it (see io_utils.write_removed_rows).
Run the code and the allele matrix through the filter separately and expect the
same rows to be removed.

Functions:
    find_rows_with_bugs: Dry run returning the rows that would be removed
    remove_rows_with_bugs: Remove buggy rows from a variant matrix

Example:
    >>> from varmat_utils.bug_filters import remove_rows_with_bugs
    >>> cleaned, removed = remove_rows_with_bugs(snpmat_allele)
    >>> print(f"{len(removed)} rows removed")
"""
import logging
from dataclasses import dataclass, asdict
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from varmat_common.cleaning_config import BUG_PATTERNS, STAGE_DESCRIPTIONS

from .annotation_parser import has_missing_locus_info, has_valid_pipe_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemovedRow:
    """A row dropped by a cleaning stage, kept for the audit log."""

    annotation: str
    stage: str
    reason: str

    def to_dict(self):
        return asdict(self)


def _has_warning(label: str) -> bool:
    return BUG_PATTERNS["warning"] in label


def _has_bad_pipe_count(label: str) -> bool:
    return not has_valid_pipe_count(label)


def _has_chr_end(label: str) -> bool:
    return BUG_PATTERNS["chr_end"] in label


def _has_none_annotation(label: str) -> bool:
    return BUG_PATTERNS["none_annotation"] in label


BUG_CHECKS: List[Tuple[str, Callable[[str], bool]]] = [
    ("warning", _has_warning),
    ("pipe_count", _has_bad_pipe_count),
    ("chr_end", _has_chr_end),
    ("missing_locus_info", has_missing_locus_info),
    ("none_annotation", _has_none_annotation),
]


def _scan(labels: List[str]) -> Tuple[np.ndarray, List[RemovedRow]]:
    """Run the ordered passes, returning the keep mask and removed rows."""
    keep = np.ones(len(labels), dtype=bool)
    removed: List[RemovedRow] = []

    for stage, check in BUG_CHECKS:
        stage_hits = 0
        for position in np.flatnonzero(keep):
            label = labels[position]
            if check(label):
                keep[position] = False
                removed.append(RemovedRow(label, stage, STAGE_DESCRIPTIONS[stage]))
                stage_hits += 1
                logger.debug(f"Removing row ({stage}): {label}")
        if stage_hits:
            logger.info(f"Bug filter '{stage}': removed {stage_hits} rows")

    return keep, removed


def find_rows_with_bugs(labels: Iterable[str]) -> List[RemovedRow]:
    """
    Identify rows with annotation bugs without modifying any matrix.

    Args:
        labels: Annotation labels (matrix row names) in matrix order

    Returns:
        list[RemovedRow]: Rows that remove_rows_with_bugs would drop, grouped
            by stage in stage order
    """
    _, removed = _scan([str(label) for label in labels])
    return removed


def remove_rows_with_bugs(
    varmat: pd.DataFrame,
    log: Optional[List[RemovedRow]] = None,
) -> Tuple[pd.DataFrame, List[RemovedRow]]:
    """
    Remove variant matrix rows whose annotations have bugs.

    Bugs include annotations with 1) warnings, 2) an incorrect number of pipes
    (should be a multiple of 9 per gene segment), 3) the string CHR_END, 4) no
    strand or locus tag information or 5) the string None.

    Args:
        varmat (pd.DataFrame): Rows are variants, columns are genomes and the
            index holds the annotations
        log (list, optional): Log sink to extend with the removed rows. A new
            list is created when omitted

    Returns:
        tuple: (cleaned_varmat, removed) where removed is the log sink holding
            one RemovedRow per dropped row, appended in stage order

    Notes:
        - Surviving rows keep their original order and data
        - A label with a single semicolon is removed by the pipe_count stage
        - Applying the filter to its own output removes nothing
    """
    sink = log if log is not None else []
    labels = [str(label) for label in varmat.index]

    keep, removed = _scan(labels)
    sink.extend(removed)

    cleaned = varmat.iloc[np.flatnonzero(keep)].copy()
    logger.info(
        f"Removed {len(removed)} of {len(labels)} rows with annotation bugs "
        f"({len(cleaned)} rows remain)"
    )
    return cleaned, sink
