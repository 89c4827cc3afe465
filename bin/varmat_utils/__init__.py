"""
Variant matrix utilities for cleaning annotated variant matrices.

This package fixes up the annotation strings attached to the rows of the
code and allele variant matrices written by the variant annotation pipeline,
so that downstream phylogenetic analyses operate on well-formed data.

Modules:
    annotation_parser: Annotation grammar parser and pattern helpers
    bug_filters: Removal of rows whose annotations carry known bugs
    variant_filters: Removal of rows without variation, correspondence checks
    row_splitter: Expansion of rows with multiple annotations into one row per event
    workflow: End-to-end cleaning of a code/allele matrix pair
    io_utils: Matrix and audit log I/O
    cleaning_statistics: Statistics for removal and split stages
    plot_utils: Plotly summary of removed rows
    logging_config: Operational logging and metrics report
    error_handler: Error taxonomy and error classification

Example:
    Stage by stage:

    >>> from varmat_utils.bug_filters import remove_rows_with_bugs
    >>> from varmat_utils.variant_filters import remove_rows_with_no_variants_or_completely_masked
    >>> from varmat_utils.row_splitter import split_rows_with_multiple_annots
    >>>
    >>> snpmat_code, _ = remove_rows_with_bugs(snpmat_code)
    >>> snpmat_allele, removed = remove_rows_with_bugs(snpmat_allele)
    >>> snpmat_code, snpmat_allele, _ = remove_rows_with_no_variants_or_completely_masked(
    ...     snpmat_code, snpmat_allele)
    >>> multi, multiallelic, overlapping, split_rows_flag, snpmat_added = \\
    ...     split_rows_with_multiple_annots(snpmat_allele)

    Whole workflow:

    >>> from varmat_utils import clean_variant_matrices
    >>> result = clean_variant_matrices(snpmat_code, snpmat_allele)
    >>> result.statistics()['split']['output_rows']
"""

__version__ = "1.0.0"

from .annotation_parser import (
    GeneSegment,
    ParsedAnnotation,
    count_dividers,
    count_pipes,
    distinct_genes,
    has_valid_pipe_count,
    is_multiallelic,
    narrow_multiallelic,
    parse_annotation,
    validate_annotation,
)
from .bug_filters import RemovedRow, find_rows_with_bugs, remove_rows_with_bugs
from .error_handler import (
    CorrespondenceViolation,
    MalformedAnnotation,
    UnresolvableAnnotationField,
    VarmatError,
)
from .row_splitter import SplitResult, split_rows_with_multiple_annots
from .variant_filters import check_correspondence, remove_rows_with_no_variants_or_completely_masked
from .workflow import CleaningResult, clean_variant_matrices
