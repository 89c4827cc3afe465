#!/usr/bin/env python3
"""
Error Handling for Variant Matrix Cleaning

This module defines the error taxonomy of the cleaning workflow and an error
handler that classifies failures for the command line.

Error taxonomy:
- MalformedAnnotation: pipe/semicolon counts inconsistent with the grammar.
  Filter stages exclude and log such rows instead of raising.
- UnresolvableAnnotationField: a locus tag or gene identifier could not be
  extracted. Filters exclude the row, the splitter reports the label.
- CorrespondenceViolation: code and allele matrices no longer refer to the
  same rows. Always a hard failure.
"""

import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class VarmatError(Exception):
    """Base class for variant matrix cleaning errors."""
    pass


class MalformedAnnotation(VarmatError):
    """Annotation does not follow the semicolon/pipe grammar."""

    def __init__(self, annotation: str, reason: str = "malformed annotation"):
        self.annotation = annotation
        self.reason = reason
        super().__init__(f"{reason}: {annotation}")


class UnresolvableAnnotationField(VarmatError):
    """A required field could not be extracted from an annotation."""

    def __init__(self, annotation: str, field_name: str):
        self.annotation = annotation
        self.field_name = field_name
        super().__init__(f"could not resolve {field_name} in: {annotation}")


class CorrespondenceViolation(VarmatError):
    """Code and allele matrices no longer share row labels and order."""

    def __init__(self, context: str, only_in_code: Optional[List[str]] = None,
                 only_in_allele: Optional[List[str]] = None):
        self.context = context
        self.only_in_code = only_in_code or []
        self.only_in_allele = only_in_allele or []
        details = []
        if self.only_in_code:
            details.append(f"{len(self.only_in_code)} rows only in code matrix")
        if self.only_in_allele:
            details.append(f"{len(self.only_in_allele)} rows only in allele matrix")
        if not details:
            details.append("row order differs")
        super().__init__(f"Row correspondence lost after {context}: {', '.join(details)}")


class ErrorHandler:
    """Classify errors raised while cleaning matrices and keep counts."""

    def __init__(self):
        self.error_count = 0
        self.warning_count = 0
        self.errors: List[Dict[str, str]] = []

    def handle_error(self, error: Exception, context: str) -> bool:
        """
        Handle errors with appropriate classification and response.

        Args:
            error: The exception that occurred
            context: Description of what was being attempted

        Returns:
            True if processing may continue, False if the error should be re-raised
        """
        self.error_count += 1
        error_type = type(error).__name__
        self.errors.append({'context': context, 'type': error_type, 'message': str(error)})

        logger.error(f"ERROR in {context}: {error_type} - {error}")

        if isinstance(error, CorrespondenceViolation):
            logger.error("Code and allele matrices diverged - downstream results would be misaligned")
            return False

        elif isinstance(error, MalformedAnnotation):
            logger.warning(f"Skipping malformed annotation: {error.annotation}")
            self.warning_count += 1
            return True

        elif isinstance(error, UnresolvableAnnotationField):
            logger.warning(f"Leaving {error.field_name} unresolved for: {error.annotation}")
            self.warning_count += 1
            return True

        elif isinstance(error, FileNotFoundError):
            logger.error("File not found - check input paths and permissions")
            return False

        elif isinstance(error, PermissionError):
            logger.error("Permission denied - check file and directory permissions")
            return False

        elif isinstance(error, MemoryError):
            logger.error("Out of memory - matrices are held in memory, try a smaller input")
            return False

        else:
            logger.error(f"Unexpected error type: {error_type}")
            return False

    def get_error_summary(self) -> Dict[str, int]:
        """Get summary of errors and warnings encountered."""
        return {
            'error_count': self.error_count,
            'warning_count': self.warning_count,
        }
