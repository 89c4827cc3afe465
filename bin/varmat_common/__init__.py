"""
Common shared configuration and validation for the variant matrix cleaning workflow.

This package contains configuration shared by varmat_utils (cleaning stages)
and the clean_varmat command line.
"""

from .cleaning_config import (
    # Grammar and bug tokens
    ANNOTATION_GRAMMAR,
    BUG_PATTERNS,
    BUG_STAGE_ORDER,
    STAGE_DESCRIPTIONS,

    # Encodings and log files
    ALLELE_ENCODING,
    LOG_FILE_TEMPLATES,

    # Run options
    CleaningConfig,

    # Utility functions
    get_parameter,
    validate_configuration,
)
from .validators import MatrixValidator, ValidationError

__all__ = [
    "ANNOTATION_GRAMMAR",
    "BUG_PATTERNS",
    "BUG_STAGE_ORDER",
    "STAGE_DESCRIPTIONS",
    "ALLELE_ENCODING",
    "LOG_FILE_TEMPLATES",
    "CleaningConfig",
    "get_parameter",
    "validate_configuration",
    "MatrixValidator",
    "ValidationError",
]
