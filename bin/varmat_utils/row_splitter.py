"""
Split variant matrix rows that carry multiple annotations.

A row whose annotation describes X events is replicated X times. Multiple
events come from 1) multiallelic sites, which get one annotation per ALT
allele, 2) variants in overlapping genes, which get one annotation per gene,
or 3) both. Every replica keeps the original row data unchanged; only its
label is rewritten so that each row describes a single event:

    - replica k of a split group is labelled '<position info>;<gene segment k+1>'
    - multiallelic labels are narrowed from '> A,C ... functional=' to the
      allele of the replica, '> C functional='

Replicas are tracked with an explicit counter (replica_index) next to the
1-based number of the input row they came from (split_rows_flag).

Run the code and the allele matrix through split_rows_with_multiple_annots
separately; both produce the same labels and the same provenance.

Example:
    >>> result = split_rows_with_multiple_annots(snpmat_allele)
    >>> multi, multiallelic, overlapping, split_rows_flag, snpmat_added = result
    >>> snpmat_added.shape[0] == len(split_rows_flag)
    True
"""
import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np
import pandas as pd

from varmat_common.cleaning_config import ANNOTATION_GRAMMAR

from .annotation_parser import (
    count_dividers,
    count_pipes,
    distinct_genes,
    is_multiallelic,
    narrow_multiallelic,
    parse_annotation,
)
from .error_handler import UnresolvableAnnotationField

logger = logging.getLogger(__name__)


@dataclass
class SplitResult:
    """
    Output of split_rows_with_multiple_annots.

    Unpacks as (multi_annot_mask, multiallelic_mask, overlapping_gene_mask,
    split_rows_flag, matrix). All arrays have one entry per output row except
    replica_counts, which has one entry per input row.
    """

    multi_annot_mask: np.ndarray
    multiallelic_mask: np.ndarray
    overlapping_gene_mask: np.ndarray
    split_rows_flag: np.ndarray
    matrix: pd.DataFrame
    replica_index: np.ndarray
    replica_counts: np.ndarray
    unresolved: List[str] = field(default_factory=list)

    def __iter__(self):
        return iter((
            self.multi_annot_mask,
            self.multiallelic_mask,
            self.overlapping_gene_mask,
            self.split_rows_flag,
            self.matrix,
        ))

    def provenance_frame(self) -> pd.DataFrame:
        """Per output row provenance as a DataFrame indexed by the new labels."""
        return pd.DataFrame(
            {
                "split_rows_flag": self.split_rows_flag,
                "replica_index": self.replica_index,
                "multiple_annotations": self.multi_annot_mask,
                "multiallelic_site": self.multiallelic_mask,
                "overlapping_genes": self.overlapping_gene_mask,
            },
            index=self.matrix.index,
        )


def _replica_offsets(replica_counts: np.ndarray) -> np.ndarray:
    """0..n-1 for every group of n replicas, e.g. [1, 3, 2] -> [0, 0, 1, 2, 0, 1]."""
    total = int(replica_counts.sum())
    if total == 0:
        return np.zeros(0, dtype=int)
    group_starts = np.repeat(np.cumsum(replica_counts) - replica_counts, replica_counts)
    return np.arange(total) - group_starts


def split_rows_with_multiple_annots(snpmat: pd.DataFrame, strict: bool = False) -> SplitResult:
    """
    Split rows that have multiple annotations.

    Args:
        snpmat (pd.DataFrame): Rows are variants, columns are genomes and the
            index holds the annotations
        strict (bool): Raise UnresolvableAnnotationField instead of keeping
            labels that cannot be rewritten to a single event

    Returns:
        SplitResult: with
            - multi_annot_mask: rows split from a row with multiple annotations
              (at least one divider and more than 9 pipes)
            - multiallelic_mask: rows split from a multiallelic site
            - overlapping_gene_mask: rows split from a variant in overlapping genes
            - split_rows_flag: 1-based input row number of every output row
              (input rows 1..4 with row 2 holding 3 events and row 4 holding 2
              give 1 2 2 2 3 4 4)
            - matrix: the expanded matrix with one annotation per row
            - replica_index: position of every output row inside its group
            - replica_counts: number of output rows per input row
            - unresolved: labels that could not be rewritten to a single event

    Notes:
        - A row is replicated once per divider; rows without a divider are
          kept once and unchanged
        - Masks are computed on the input rows and broadcast to every replica
    """
    labels = [str(label) for label in snpmat.index]
    n_rows = len(labels)
    max_pipes = ANNOTATION_GRAMMAR["pipes_per_gene_segment"]

    parsed = [parse_annotation(label) for label in labels]
    num_dividers = np.array([count_dividers(label) for label in labels], dtype=int)
    num_pipes = np.array([count_pipes(label) for label in labels], dtype=int)

    rows_with_multiple_annotations = (num_dividers >= 1) & (num_pipes > max_pipes)
    rows_with_multi_allelic_sites = np.array([is_multiallelic(label) for label in labels], dtype=bool)

    rows_with_overlapping_genes = np.zeros(n_rows, dtype=bool)
    for position in np.flatnonzero(rows_with_multiple_annotations):
        segments = parsed[position].segments
        if any(segment.gene is None for segment in segments):
            logger.warning(f"Gene identifier missing in a segment of: {labels[position]}")
        rows_with_overlapping_genes[position] = len(distinct_genes(parsed[position])) > 1

    replica_counts = np.maximum(num_dividers, 1)
    source_rows = np.repeat(np.arange(n_rows), replica_counts)
    replica_index = _replica_offsets(replica_counts)

    new_labels = []
    unresolved = []

    def report(label, field_name):
        if strict:
            raise UnresolvableAnnotationField(label, field_name)
        logger.warning(f"Could not resolve {field_name}, keeping label: {label}")
        unresolved.append(label)

    for source, replica in zip(source_rows, replica_index):
        label = labels[source]
        new_label = label
        resolved = True

        if replica_counts[source] > 1:
            rendered = parsed[source].render_event(int(replica))
            if rendered is None or not parsed[source].segments[int(replica)].raw:
                report(label, f"gene segment {replica + 1}")
                resolved = False
            else:
                new_label = rendered

        # the allele of an unresolved replica cannot be read from its label
        if resolved and rows_with_multi_allelic_sites[source]:
            narrowed = narrow_multiallelic(new_label)
            if narrowed is None:
                report(new_label, "multiallelic allele")
            else:
                new_label = narrowed

        new_labels.append(new_label)

    snpmat_added = snpmat.iloc[source_rows].copy()
    snpmat_added.index = pd.Index(new_labels, name=snpmat.index.name)

    split_groups = int((replica_counts > 1).sum())
    logger.info(
        f"Split {split_groups} of {n_rows} rows into {len(new_labels)} rows "
        f"({int(rows_with_multi_allelic_sites.sum())} multiallelic, "
        f"{int(rows_with_overlapping_genes.sum())} in overlapping genes)"
    )
    if unresolved:
        logger.warning(f"{len(unresolved)} labels could not be rewritten to a single event")

    return SplitResult(
        multi_annot_mask=rows_with_multiple_annotations[source_rows],
        multiallelic_mask=rows_with_multi_allelic_sites[source_rows],
        overlapping_gene_mask=rows_with_overlapping_genes[source_rows],
        split_rows_flag=source_rows + 1,
        matrix=snpmat_added,
        replica_index=replica_index,
        replica_counts=replica_counts,
        unresolved=unresolved,
    )
