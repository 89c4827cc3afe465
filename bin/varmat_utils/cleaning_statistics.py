"""
Statistics generation functions for the cleaning workflow.

This module provides reusable functions for summarising how many rows each
cleaning stage removed and how many rows the splitter produced.
"""
from collections import Counter

import pandas as pd

from varmat_common.cleaning_config import BUG_STAGE_ORDER, STAGE_DESCRIPTIONS


def compute_removal_statistics(removed, input_rows):
    """
    Compute statistics for the removal stages.

    Args:
        removed (list): RemovedRow records from the bug and presence filters
        input_rows (int): Number of rows before filtering

    Returns:
        dict: Statistics summary containing:
            - input_rows: Rows before filtering
            - removed_rows: Total rows removed
            - remaining_rows: Rows left after filtering
            - by_stage: Removed rows per stage, in stage order
            - removal_rate: Percentage of input rows removed

    Example:
        >>> stats = compute_removal_statistics(removed, snpmat.shape[0])
        >>> print(f"Removed: {stats['removed_rows']}")
    """
    per_stage = Counter(record.stage for record in removed)
    ordered_stages = BUG_STAGE_ORDER + ['no_variants']

    stats = {
        'input_rows': input_rows,
        'removed_rows': len(removed),
        'remaining_rows': input_rows - len(removed),
        'by_stage': {stage: per_stage.get(stage, 0) for stage in ordered_stages},
    }

    if input_rows > 0:
        stats['removal_rate'] = (len(removed) / input_rows) * 100
    else:
        stats['removal_rate'] = 0.0

    return stats


def compute_split_statistics(result):
    """
    Compute statistics for a row split.

    Args:
        result (SplitResult): Output of split_rows_with_multiple_annots

    Returns:
        dict: Statistics summary containing:
            - input_rows: Rows before splitting
            - output_rows: Rows after splitting
            - split_groups: Input rows expanded into more than one row
            - multiple_annotation_rows: Output rows flagged as multiple annotations
            - multiallelic_rows: Output rows flagged as multiallelic
            - overlapping_gene_rows: Output rows flagged as overlapping genes
            - unresolved: Labels that could not be rewritten
    """
    counts = result.replica_counts
    return {
        'input_rows': int(len(counts)),
        'output_rows': int(result.matrix.shape[0]),
        'split_groups': int((counts > 1).sum()),
        'multiple_annotation_rows': int(result.multi_annot_mask.sum()),
        'multiallelic_rows': int(result.multiallelic_mask.sum()),
        'overlapping_gene_rows': int(result.overlapping_gene_mask.sum()),
        'unresolved': len(result.unresolved),
    }


def summary_frame(removal_stats):
    """Removed rows per stage as a DataFrame with Stage, Description and Count columns."""
    rows = [
        {
            'Stage': stage,
            'Description': STAGE_DESCRIPTIONS.get(stage, stage),
            'Count': count,
        }
        for stage, count in removal_stats['by_stage'].items()
    ]
    return pd.DataFrame(rows, columns=['Stage', 'Description', 'Count'])


def print_statistics(stats, operation_type='removal'):
    """
    Print formatted statistics to stdout.

    Args:
        stats (dict): Statistics dictionary from compute_removal_statistics()
            or compute_split_statistics()
        operation_type (str): 'removal' or 'split'
    """
    if operation_type == 'removal':
        print("\n- Removal statistics:")
        print(f"  - Input rows: {stats['input_rows']:,}")
        for stage, count in stats['by_stage'].items():
            print(f"  - {STAGE_DESCRIPTIONS.get(stage, stage)}: {count:,}")
        print(f"  - Remaining rows: {stats['remaining_rows']:,} "
              f"({stats['removal_rate']:.1f}% removed)")

    elif operation_type == 'split':
        print("\n- Split statistics:")
        print(f"  - Input rows: {stats['input_rows']:,}")
        print(f"  - Output rows: {stats['output_rows']:,} (split groups: {stats['split_groups']:,})")
        print(f"  - Multiple annotations: {stats['multiple_annotation_rows']:,}")
        print(f"  - Multiallelic sites: {stats['multiallelic_rows']:,}")
        print(f"  - Overlapping genes: {stats['overlapping_gene_rows']:,}")
        if stats['unresolved']:
            print(f"  - Unresolved labels: {stats['unresolved']:,}")

    else:
        raise ValueError(f"Unknown operation_type: {operation_type}. Must be 'removal' or 'split'.")
