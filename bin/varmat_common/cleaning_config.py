#!/usr/bin/env python3
"""
Variant Matrix Cleaning Configuration Module

Centralized configuration for the variant matrix cleaning workflow. Provides a
single source of truth for the annotation grammar, the tokens that identify
buggy annotations, the allele encodings of the code/allele matrices and the
names of the dated audit log files.

The annotation grammar mirrors the row names written by the upstream variant
annotation pipeline:

    <position info>;<allele>|<effect>|<impact>|<gene>|...|;<allele>|...|;

  - segment 1 holds the position, the ALT allele(s), the functional class,
    the locus tag and the strand information
  - every following segment describes one gene context and carries 9 pipes
  - the label usually ends with a terminal ';'

USAGE:
    from varmat_common.cleaning_config import BUG_PATTERNS, ANNOTATION_GRAMMAR

    warning_token = BUG_PATTERNS["warning"]
    pipes_per_segment = ANNOTATION_GRAMMAR["pipes_per_gene_segment"]

    config = CleaningConfig.from_env()
"""

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional

# ============================================================================
# ANNOTATION GRAMMAR
# ============================================================================

ANNOTATION_GRAMMAR = {
    # Separates the position segment from each gene segment
    "segment_separator": ";",

    # Separates the fields of one gene segment
    "field_separator": "|",

    # Every well-formed gene segment carries this many pipes
    "pipes_per_gene_segment": 9,

    # 0-based position of the gene identifier inside a gene segment
    "gene_field_index": 3,

    # A gene segment opens with one of these alleles (a "divider" is ';' + allele)
    "nucleotides": "ACGT",

    # Marker closing the ALT allele(s) in the position segment
    "functional_marker": "functional=",

    # Keys used to pull the locus tag out of the position segment
    "locus_tag_key": "locus_tag=",
    "strand_key": " Strand ",
    "strand_information_key": "Strand Information:",
}

# ============================================================================
# BUG PATTERNS (row removal reasons, applied in this order)
# ============================================================================

BUG_PATTERNS = {
    # 1. Annotation pipeline emitted a warning for the row
    "warning": "WARNING",

    # 3. Last gene of the genome is reported as CHR_END instead of a locus
    "chr_end": "CHR_END",

    # 4a. Locus tag could not be resolved
    "null_locus_tag": "NULL",

    # 4b. Strand could not be resolved
    "no_strand": "No Strand Information found",

    # 5. Annotation body is empty
    "none_annotation": "None",
}

BUG_STAGE_ORDER = [
    "warning",
    "pipe_count",
    "chr_end",
    "missing_locus_info",
    "none_annotation",
]

STAGE_DESCRIPTIONS = {
    "warning": "annotation contains a WARNING token",
    "pipe_count": "pipe count is not a multiple of 9 per gene segment",
    "chr_end": "annotation still reports CHR_END",
    "missing_locus_info": "no locus tag or no strand information",
    "none_annotation": "annotation contains None",
    "no_variants": "no variation across samples or completely masked",
}

# ============================================================================
# ALLELE ENCODING
# ============================================================================

ALLELE_ENCODING = {
    # Characters allowed in the allele matrix
    "alleles": ["A", "C", "G", "T", "N", "-"],

    # Masked call
    "masked_allele": "N",

    # Gap / deletion
    "gap_allele": "-",

    # Inclusive range of the numeric code matrix
    "code_minimum": -4,
    "code_maximum": 3,
}

# ============================================================================
# AUDIT LOG FILES
# ============================================================================

LOG_FILE_TEMPLATES = {
    "bugs": "{date}_rows_removed_from_{name}_due_to_bugs.txt",
    "no_variants": "{date}_rows_removed_because_no_variants.txt",
}

ENVIRONMENT_VARIABLES = {
    "VARMAT_LOG_DIR": "Directory for dated audit logs and log files",
    "VARMAT_LOG_LEVEL": "Set logging level (DEBUG, INFO, WARNING, ERROR)",
    "VARMAT_WRITE_LOGS": "Write dated audit logs of removed rows (true/false)",
    "VARMAT_ENABLE_METRICS": "Enable metrics collection (true/false)",
}


@dataclass
class CleaningConfig:
    """Per-run options for the cleaning workflow."""

    log_dir: Optional[Path] = None
    matrix_name: str = "varmat"
    write_logs: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, **overrides) -> "CleaningConfig":
        """Build a configuration from VARMAT_* environment variables."""
        log_dir = os.environ.get("VARMAT_LOG_DIR")
        values = {
            "log_dir": Path(log_dir) if log_dir else None,
            "write_logs": os.environ.get("VARMAT_WRITE_LOGS", "false").lower() == "true",
            "log_level": os.environ.get("VARMAT_LOG_LEVEL", "INFO").upper(),
        }
        values.update(overrides)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["log_dir"] = str(self.log_dir) if self.log_dir else None
        return data


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def get_parameter(category: str, name: str) -> Any:
    """
    Get a configuration value by category and name.

    Args:
        category: "GRAMMAR", "BUGS", "ALLELES" or "LOGS"
        name: Name of the specific parameter

    Returns:
        Parameter value

    Raises:
        KeyError: If category or parameter not found
    """
    config_map = {
        "GRAMMAR": ANNOTATION_GRAMMAR,
        "BUGS": BUG_PATTERNS,
        "ALLELES": ALLELE_ENCODING,
        "LOGS": LOG_FILE_TEMPLATES,
    }

    if category not in config_map:
        raise KeyError(f"Unknown configuration category: {category}")

    if name not in config_map[category]:
        raise KeyError(f"Unknown parameter '{name}' in {category}")

    return config_map[category][name]


def validate_configuration() -> Dict[str, Any]:
    """
    Validate the configured grammar and encodings for consistency.

    Returns:
        Dictionary with validation results
    """
    issues = []

    if ANNOTATION_GRAMMAR["pipes_per_gene_segment"] < 1:
        issues.append("pipes_per_gene_segment must be >= 1")
    if ANNOTATION_GRAMMAR["gene_field_index"] > ANNOTATION_GRAMMAR["pipes_per_gene_segment"]:
        issues.append("gene_field_index must fall inside a gene segment")
    if ANNOTATION_GRAMMAR["segment_separator"] == ANNOTATION_GRAMMAR["field_separator"]:
        issues.append("segment and field separators must differ")
    if ALLELE_ENCODING["code_minimum"] > ALLELE_ENCODING["code_maximum"]:
        issues.append("code_minimum must not exceed code_maximum")
    if ALLELE_ENCODING["masked_allele"] not in ALLELE_ENCODING["alleles"]:
        issues.append("masked_allele must be a valid allele")

    return {
        "valid": len(issues) == 0,
        "issues": issues,
    }


def print_configuration_summary() -> None:
    """Print configuration summary for debugging."""
    print("=" * 80)
    print("VARIANT MATRIX CLEANING CONFIGURATION")
    print("=" * 80)

    print("\nANNOTATION GRAMMAR:")
    for key, value in ANNOTATION_GRAMMAR.items():
        print(f"  {key}: {value!r}")

    print("\nBUG PATTERNS:")
    for key, value in BUG_PATTERNS.items():
        print(f"  {key}: {value!r}")

    print("\nALLELE ENCODING:")
    for key, value in ALLELE_ENCODING.items():
        print(f"  {key}: {value}")

    print("\nENVIRONMENT VARIABLES:")
    for key, description in ENVIRONMENT_VARIABLES.items():
        print(f"  {key}={os.environ.get(key, '')!r}  ({description})")

    print("\n" + "=" * 80)


if __name__ == "__main__":
    print_configuration_summary()

    validation = validate_configuration()
    if validation["issues"]:
        print("\nVALIDATION ISSUES:")
        for issue in validation["issues"]:
            print(f"  x {issue}")
    else:
        print("\nConfiguration validated successfully")
