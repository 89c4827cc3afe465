#!/usr/bin/env python3
"""
Variant Matrix Validators

Validation framework for the inputs of the cleaning workflow. Checks that a
matrix is a DataFrame labelled by annotation strings, that allele and code
matrices hold values from their encodings, and that the parameters handed to
the command line are usable. Prevents invalid input from reaching the
cleaning modules.

USAGE:
    from varmat_common.validators import MatrixValidator

    validator = MatrixValidator()
    is_valid, issues = validator.validate_allele_matrix(snpmat_allele)
    validator.validate_or_raise(snpmat_code, snpmat_allele)
"""

import os
from pathlib import Path
from typing import List, Tuple

import numpy as np
import pandas as pd

from .cleaning_config import ALLELE_ENCODING


class ValidationError(Exception):
    """Custom exception for validation failures."""
    pass


class ParameterValidator:
    """Base class for parameter validation with common utility methods."""

    @staticmethod
    def is_file_readable(filepath) -> bool:
        """Check if file exists and is readable."""
        try:
            path = Path(filepath)
            return path.is_file() and os.access(path, os.R_OK)
        except (TypeError, ValueError):
            return False

    @staticmethod
    def is_directory_writable(dirpath) -> bool:
        """Check if directory exists (or can be created) and is writable."""
        try:
            path = Path(dirpath)
            if path.exists():
                return path.is_dir() and os.access(path, os.W_OK)
            return os.access(path.parent if str(path.parent) else Path.cwd(), os.W_OK)
        except (TypeError, ValueError):
            return False

    @staticmethod
    def in_range(value: float, min_val: float, max_val: float) -> bool:
        """Check if numeric value is in valid range."""
        try:
            return min_val <= float(value) <= max_val
        except (TypeError, ValueError):
            return False


class MatrixValidator(ParameterValidator):
    """Validator for code and allele variant matrices."""

    def validate_structure(self, matrix, name: str = "matrix") -> Tuple[bool, List[str]]:
        """
        Validate that a matrix is a labelled DataFrame.

        Args:
            matrix: Candidate variant matrix
            name: Name used in messages

        Returns:
            (is_valid, list_of_issues)
        """
        issues = []

        if not isinstance(matrix, pd.DataFrame):
            issues.append(f"{name} must be a pandas DataFrame, got {type(matrix).__name__}")
            return False, issues

        non_string = [label for label in matrix.index if not isinstance(label, str)]
        if non_string:
            issues.append(f"{name} has {len(non_string)} row labels that are not annotation strings")

        if matrix.index.has_duplicates:
            issues.append(f"{name} has duplicated row labels")

        return len(issues) == 0, issues

    def validate_allele_matrix(self, matrix, name: str = "allele matrix") -> Tuple[bool, List[str]]:
        """Validate structure and allele characters of an allele matrix."""
        is_valid, issues = self.validate_structure(matrix, name)
        if not isinstance(matrix, pd.DataFrame) or matrix.empty:
            return is_valid, issues

        allowed = set(ALLELE_ENCODING["alleles"])
        observed = set(pd.unique(matrix.to_numpy().ravel()))
        unexpected = sorted(str(value) for value in observed - allowed)
        if unexpected:
            issues.append(f"{name} contains unexpected alleles: {', '.join(unexpected)}")

        return len(issues) == 0, issues

    def validate_code_matrix(self, matrix, name: str = "code matrix") -> Tuple[bool, List[str]]:
        """Validate structure and numeric range of a code matrix."""
        is_valid, issues = self.validate_structure(matrix, name)
        if not isinstance(matrix, pd.DataFrame) or matrix.empty:
            return is_valid, issues

        values = matrix.to_numpy()
        if not np.issubdtype(values.dtype, np.number):
            issues.append(f"{name} must be numeric, got dtype {values.dtype}")
            return False, issues

        low = ALLELE_ENCODING["code_minimum"]
        high = ALLELE_ENCODING["code_maximum"]
        if np.nanmin(values) < low or np.nanmax(values) > high:
            issues.append(f"{name} values must lie in {low}..{high}")

        return len(issues) == 0, issues

    def validate_pair(self, code_matrix, allele_matrix) -> Tuple[bool, List[str]]:
        """Validate a code/allele matrix pair including their shared shape."""
        _, issues = self.validate_code_matrix(code_matrix)
        _, allele_issues = self.validate_allele_matrix(allele_matrix)
        issues.extend(allele_issues)

        if isinstance(code_matrix, pd.DataFrame) and isinstance(allele_matrix, pd.DataFrame):
            if code_matrix.shape != allele_matrix.shape:
                issues.append(
                    f"code matrix shape {code_matrix.shape} differs from allele matrix shape {allele_matrix.shape}"
                )
            elif not code_matrix.index.equals(allele_matrix.index):
                issues.append("code and allele matrices have different row labels")

        return len(issues) == 0, issues

    def validate_or_raise(self, code_matrix, allele_matrix) -> None:
        """Validate a matrix pair and raise ValidationError on any issue."""
        is_valid, issues = self.validate_pair(code_matrix, allele_matrix)
        if not is_valid:
            raise ValidationError("; ".join(issues))
