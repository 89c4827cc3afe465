"""
I/O utility functions for variant matrix files and audit logs.

This module reads and writes the code/allele matrices produced by the variant
annotation pipeline (delimited text, first column holding the annotations)
and persists the removed-row log sinks returned by the cleaning stages as
dated, append-only text files with one annotation per line.

Functions:
    get_matrix_name: Derive a matrix name from its filename
    get_pair_name: Derive the shared name of a code/allele pair
    read_variant_matrix: Read a delimited matrix with annotations as index
    write_variant_matrix: Write a matrix with annotations as first column
    get_log_path: Build the dated audit log path for a stage group
    write_removed_rows: Append removed annotations to the dated audit log
    write_split_provenance: Write masks and provenance of a split

Example:
    >>> from varmat_utils.io_utils import read_variant_matrix, write_removed_rows
    >>>
    >>> snpmat_allele = read_variant_matrix('snpmat_allele.tsv.gz')
    >>> cleaned, removed = remove_rows_with_bugs(snpmat_allele)
    >>> write_removed_rows(removed, 'logs', 'snpmat_allele')
    PosixPath('logs/2024-05-01_rows_removed_from_snpmat_allele_due_to_bugs.txt')
"""
import datetime
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd

from varmat_common.cleaning_config import LOG_FILE_TEMPLATES

logger = logging.getLogger(__name__)

MATRIX_SUFFIXES = ('.gz', '.bz2', '.xz', '.zip', '.tsv', '.txt', '.csv', '.tab')
MATRIX_KINDS = ('_allele', '_code')


def get_matrix_name(filename):
    """
    Derive a matrix name from its filename by stripping known suffixes.

    Example:
        >>> get_matrix_name('data/snpmat_code.tsv.gz')
        'snpmat_code'
    """
    name = Path(filename).name
    stripped = True
    while stripped:
        stripped = False
        for suffix in MATRIX_SUFFIXES:
            if name.lower().endswith(suffix) and len(name) > len(suffix):
                name = name[:-len(suffix)]
                stripped = True
    return name


def get_pair_name(filename):
    """
    Derive the name shared by a code/allele pair from either of its files.

    Example:
        >>> get_pair_name('data/snpmat_allele.tsv.gz')
        'snpmat'
    """
    name = get_matrix_name(filename)
    for kind in MATRIX_KINDS:
        if name.endswith(kind) and len(name) > len(kind):
            return name[:-len(kind)]
    return name


def _infer_separator(path: Path) -> str:
    suffixes = [s.lower() for s in path.suffixes]
    return ',' if '.csv' in suffixes else '\t'


def read_variant_matrix(path: Union[str, Path], sep: Optional[str] = None) -> pd.DataFrame:
    """
    Read a variant matrix with annotations in the first column.

    Args:
        path: Delimited text file, optionally compressed
        sep: Column separator, inferred from the suffix when omitted
            (',' for .csv, tab otherwise)

    Returns:
        pd.DataFrame: Variants as rows indexed by annotation, genomes as columns

    Notes:
        - Cells are read literally; only empty cells become missing values,
          so alleles like 'N' and labels containing 'None' or 'NULL' survive
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Variant matrix not found: {path}")

    matrix = pd.read_csv(
        path,
        sep=sep or _infer_separator(path),
        index_col=0,
        keep_default_na=False,
        na_values=[''],
        compression='infer',
    )
    matrix.index = matrix.index.astype(str)
    matrix.columns = matrix.columns.astype(str)
    logger.info(f"Read {matrix.shape[0]} rows x {matrix.shape[1]} samples from {path}")
    return matrix


def write_variant_matrix(matrix: pd.DataFrame, path: Union[str, Path], sep: Optional[str] = None) -> Path:
    """Write a variant matrix with annotations as the first column."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    matrix.to_csv(path, sep=sep or _infer_separator(path), compression='infer')
    logger.info(f"Wrote {matrix.shape[0]} rows x {matrix.shape[1]} samples to {path}")
    return path


def get_log_path(log_dir: Union[str, Path], group: str = 'bugs', matrix_name: str = 'varmat',
                 run_date: Optional[datetime.date] = None) -> Path:
    """
    Build the dated audit log path for a stage group.

    Args:
        log_dir: Directory holding the audit logs
        group: 'bugs' or 'no_variants'
        matrix_name: Name of the matrix the rows were removed from
        run_date: Date stamp, today when omitted

    Returns:
        Path like '<log_dir>/2024-05-01_rows_removed_from_snpmat_code_due_to_bugs.txt'
    """
    if group not in LOG_FILE_TEMPLATES:
        raise KeyError(f"Unknown log group: {group}")
    run_date = run_date or datetime.date.today()
    filename = LOG_FILE_TEMPLATES[group].format(date=run_date.isoformat(), name=matrix_name)
    return Path(log_dir) / filename


def write_removed_rows(records: Iterable, log_dir: Union[str, Path], matrix_name: str = 'varmat',
                       group: str = 'bugs', run_date: Optional[datetime.date] = None) -> Path:
    """
    Append removed annotations to the dated audit log, one per line.

    Records are written in the order given, which for the bug filter is
    grouped by stage. Existing logs are appended to, never overwritten.

    Args:
        records: RemovedRow records (or plain annotation strings)
        log_dir: Directory holding the audit logs
        matrix_name: Name of the matrix the rows were removed from
        group: 'bugs' or 'no_variants'
        run_date: Date stamp, today when omitted

    Returns:
        Path of the audit log
    """
    log_path = get_log_path(log_dir, group, matrix_name, run_date)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(log_path, 'a') as handle:
        for record in records:
            annotation = getattr(record, 'annotation', record)
            handle.write(f"{annotation}\n")
            count += 1

    logger.info(f"Logged {count} removed rows to {log_path}")
    return log_path


def write_split_provenance(result, path: Union[str, Path]) -> Path:
    """Write the masks and provenance vectors of a SplitResult as a table."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame = result.provenance_frame()
    frame.index.name = 'annotation'
    frame.to_csv(path, sep=_infer_separator(path), compression='infer')
    logger.info(f"Wrote split provenance for {len(frame)} rows to {path}")
    return path
