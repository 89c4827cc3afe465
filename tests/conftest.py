"""Pytest configuration and fixtures for varmat-clean tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "bin"))

from fixtures.annotation_generator import AnnotationGenerator  # noqa: E402


@pytest.fixture
def annotations():
    """Annotation label generator."""
    return AnnotationGenerator


@pytest.fixture
def clean_labels(annotations):
    """Three well-formed labels: a single gene, overlapping genes and a multiallelic site."""
    return [
        annotations.single(pos=100),
        annotations.overlapping(pos=200),
        annotations.multiallelic(pos=300),
    ]


@pytest.fixture
def mixed_pair(annotations):
    """Code/allele pair mixing clean, buggy and invariant rows."""
    rows = {
        annotations.single(pos=100): "AACT",
        annotations.single(pos=110, kind="WARNING: low coverage Coding SNP"): "AACC",
        annotations.single(pos=120) + "extra|": "AAGG",
        annotations.single(pos=130, locus_tag="NULL"): "ACCC",
        annotations.single(pos=140): "GGGG",
        annotations.single(pos=150): "NNNN",
        annotations.overlapping(pos=200): "AATT",
        annotations.multiallelic(pos=300): "ACGN",
    }
    return annotations.matrices(rows)
