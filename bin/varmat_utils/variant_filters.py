"""
Variant presence filtering for code/allele matrix pairs.

Rows that carry no variation (the same allele in every sample, including rows
that are completely masked with N) are removed from both matrices with one
shared mask, so that row i of the code matrix and row i of the allele matrix
keep referring to the same genomic event.

Functions:
    check_correspondence: Raise if two matrices no longer share row labels/order
    find_rows_without_variants: Boolean mask of monomorphic rows
    remove_rows_with_no_variants_or_completely_masked: Apply the mask to both matrices
"""
import logging
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from varmat_common.cleaning_config import STAGE_DESCRIPTIONS

from .bug_filters import RemovedRow
from .error_handler import CorrespondenceViolation

logger = logging.getLogger(__name__)


def check_correspondence(code_matrix: pd.DataFrame, allele_matrix: pd.DataFrame,
                         context: str = "transform") -> None:
    """
    Verify that code and allele matrices have identical row labels in identical order.

    Args:
        code_matrix (pd.DataFrame): Numeric code matrix
        allele_matrix (pd.DataFrame): Character allele matrix
        context (str): Stage name used in the error message

    Raises:
        CorrespondenceViolation: If the labels or their order differ
    """
    code_labels = list(code_matrix.index)
    allele_labels = list(allele_matrix.index)
    if code_labels == allele_labels:
        return

    code_set = set(code_labels)
    allele_set = set(allele_labels)
    only_in_code = [label for label in code_labels if label not in allele_set]
    only_in_allele = [label for label in allele_labels if label not in code_set]
    raise CorrespondenceViolation(context, only_in_code, only_in_allele)


def find_rows_without_variants(allele_matrix: pd.DataFrame) -> np.ndarray:
    """
    Flag rows holding a single distinct allele across all samples.

    Missing values count as one more distinct value, so a row of A and NaN
    is not flagged.
    """
    if allele_matrix.shape[1] == 0:
        return np.ones(len(allele_matrix), dtype=bool)
    return (allele_matrix.nunique(axis=1, dropna=False) == 1).to_numpy()


def remove_rows_with_no_variants_or_completely_masked(
    snpmat_code: pd.DataFrame,
    snpmat_allele: pd.DataFrame,
    log: Optional[List[RemovedRow]] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame, List[RemovedRow]]:
    """
    Remove rows with no variants or that are completely masked.

    Args:
        snpmat_code (pd.DataFrame): Variants as numeric codes (-4..3), genomes
            as columns, annotations as index
        snpmat_allele (pd.DataFrame): Variants as alleles (A, C, G, T, N, -),
            same shape and labels as snpmat_code
        log (list, optional): Log sink to extend with the removed rows

    Returns:
        tuple: (snpmat_code, snpmat_allele, removed). Both matrices have the
            same dimensions and row names, and every remaining row has at least
            two distinct alleles

    Raises:
        CorrespondenceViolation: If the matrices disagree on row labels on entry
    """
    check_correspondence(snpmat_code, snpmat_allele, "variant presence filter (input)")
    sink = log if log is not None else []

    no_variants = find_rows_without_variants(snpmat_allele)
    for label in snpmat_allele.index[no_variants]:
        sink.append(RemovedRow(str(label), "no_variants", STAGE_DESCRIPTIONS["no_variants"]))
        logger.debug(f"Removing row without variants: {label}")

    keep = np.flatnonzero(~no_variants)
    code_kept = snpmat_code.iloc[keep].copy()
    allele_kept = snpmat_allele.iloc[keep].copy()

    logger.info(
        f"Removed {int(no_variants.sum())} of {len(no_variants)} rows without variants "
        f"({len(keep)} rows remain)"
    )
    return code_kept, allele_kept, sink
