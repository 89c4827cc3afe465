#!/usr/bin/env python3
"""
Cleaning Workflow Module

Runs the cleaning stages over a code/allele matrix pair in order:

    matrix pair -> bug filter -> variant presence filter -> row splitter

The bug filter and the splitter run on each matrix separately; after every
stage the pair is checked for row correspondence (same labels, same order).
A divergence raises CorrespondenceViolation since every downstream analysis
depends on row i of both matrices describing the same event.

Usage Example:
    >>> from varmat_utils.workflow import clean_variant_matrices
    >>> from varmat_common import CleaningConfig
    >>>
    >>> result = clean_variant_matrices(
    ...     snpmat_code, snpmat_allele,
    ...     CleaningConfig(log_dir=Path("logs"), matrix_name="snpmat", write_logs=True),
    ... )
    >>> result.allele_matrix.shape
    >>> result.split.split_rows_flag
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from varmat_common.cleaning_config import CleaningConfig
from varmat_common.validators import MatrixValidator

from .bug_filters import RemovedRow, remove_rows_with_bugs
from .cleaning_statistics import compute_removal_statistics, compute_split_statistics
from .error_handler import CorrespondenceViolation
from .io_utils import write_removed_rows
from .logging_config import OperationalLogger
from .row_splitter import SplitResult, split_rows_with_multiple_annots
from .variant_filters import check_correspondence, remove_rows_with_no_variants_or_completely_masked

logger = logging.getLogger(__name__)


@dataclass
class CleaningResult:
    """
    Output of clean_variant_matrices.

    Attributes:
        code_matrix: Cleaned and split code matrix
        allele_matrix: Cleaned and split allele matrix, same labels as code_matrix
        split: SplitResult of the allele matrix (masks and provenance)
        bug_removals: RemovedRow records of the bug filter
        variant_removals: RemovedRow records of the presence filter
        input_rows: Rows of the input pair
        log_paths: Audit logs written during the run
    """

    code_matrix: pd.DataFrame
    allele_matrix: pd.DataFrame
    split: SplitResult
    bug_removals: List[RemovedRow]
    variant_removals: List[RemovedRow]
    input_rows: int
    log_paths: List[Path] = field(default_factory=list)

    @property
    def removed(self) -> List[RemovedRow]:
        return self.bug_removals + self.variant_removals

    def statistics(self) -> dict:
        return {
            'removal': compute_removal_statistics(self.removed, self.input_rows),
            'split': compute_split_statistics(self.split),
        }


def _check_split_correspondence(code_split: SplitResult, allele_split: SplitResult) -> None:
    check_correspondence(code_split.matrix, allele_split.matrix, "row splitter")
    if not np.array_equal(code_split.split_rows_flag, allele_split.split_rows_flag):
        raise CorrespondenceViolation("row splitter (provenance)")


def clean_variant_matrices(
    snpmat_code: pd.DataFrame,
    snpmat_allele: pd.DataFrame,
    config: Optional[CleaningConfig] = None,
    op_logger: Optional[OperationalLogger] = None,
) -> CleaningResult:
    """
    Clean a code/allele matrix pair.

    Args:
        snpmat_code: Numeric code matrix, annotations as index
        snpmat_allele: Allele matrix with the same labels as snpmat_code
        config: Run options; audit logs are written when write_logs is set
            and log_dir is given
        op_logger: Optional OperationalLogger receiving stage records

    Returns:
        CleaningResult

    Raises:
        ValidationError: If the input pair is not a valid code/allele matrix pair
        CorrespondenceViolation: If the matrices diverge after any stage
    """
    config = config or CleaningConfig()
    MatrixValidator().validate_or_raise(snpmat_code, snpmat_allele)
    input_rows = snpmat_allele.shape[0]

    def stage(name, status, **data):
        if op_logger is not None:
            op_logger.log_stage(name, status, data or None)

    # 1. Bug filter, run on both matrices
    stage("bug_filter", "START", rows=input_rows)
    started = time.time()
    code_filtered, code_removed = remove_rows_with_bugs(snpmat_code)
    allele_filtered, allele_removed = remove_rows_with_bugs(snpmat_allele)
    try:
        check_correspondence(code_filtered, allele_filtered, "bug filter")
    except CorrespondenceViolation:
        stage("bug_filter", "FAILED")
        raise
    stage("bug_filter", "COMPLETE", removed=len(allele_removed), remaining=allele_filtered.shape[0])
    if op_logger is not None:
        op_logger.log_performance("bug_filter", time.time() - started, input_rows)

    # 2. Variant presence filter, one mask for both matrices
    stage("variant_presence_filter", "START", rows=allele_filtered.shape[0])
    code_present, allele_present, variant_removed = remove_rows_with_no_variants_or_completely_masked(
        code_filtered, allele_filtered
    )
    stage("variant_presence_filter", "COMPLETE", removed=len(variant_removed),
          remaining=allele_present.shape[0])

    # 3. Row splitter, run on both matrices
    stage("row_splitter", "START", rows=allele_present.shape[0])
    code_split = split_rows_with_multiple_annots(code_present)
    allele_split = split_rows_with_multiple_annots(allele_present)
    try:
        _check_split_correspondence(code_split, allele_split)
    except CorrespondenceViolation:
        stage("row_splitter", "FAILED")
        raise
    stage("row_splitter", "COMPLETE", rows=allele_split.matrix.shape[0],
          unresolved=len(allele_split.unresolved))

    result = CleaningResult(
        code_matrix=code_split.matrix,
        allele_matrix=allele_split.matrix,
        split=allele_split,
        bug_removals=allele_removed,
        variant_removals=variant_removed,
        input_rows=input_rows,
    )

    if config.write_logs:
        if config.log_dir is None:
            logger.warning("write_logs is set but no log_dir was given; skipping audit logs")
        else:
            result.log_paths.append(
                write_removed_rows(code_removed, config.log_dir, f"{config.matrix_name}_code")
            )
            result.log_paths.append(
                write_removed_rows(allele_removed, config.log_dir, f"{config.matrix_name}_allele")
            )
            result.log_paths.append(
                write_removed_rows(variant_removed, config.log_dir, config.matrix_name, group='no_variants')
            )

    if op_logger is not None:
        stats = result.statistics()
        op_logger.log_metric("rows_removed", stats['removal']['removed_rows'], "counter")
        op_logger.log_metric("rows_after_split", stats['split']['output_rows'], "counter")

    return result
