"""Tests for splitting rows with multiple annotations."""

import numpy as np
import pandas as pd
import pytest

from varmat_utils.annotation_parser import count_dividers
from varmat_utils.error_handler import UnresolvableAnnotationField
from varmat_utils.row_splitter import SplitResult, split_rows_with_multiple_annots

TWO_GENES = "pos100;GENE1|tag1|f3|gene1|f5|f6|f7|f8|f9;GENE2|tag2|f3|gene2|f5|f6|f7|f8|f9"


def _matrix(labels, width=3):
    data = [[f"{chr(65 + i)}{j}" for j in range(width)] for i in range(len(labels))]
    return pd.DataFrame(data, index=labels, columns=[f"S{j + 1}" for j in range(width)])


class TestSplitScenarios:
    def test_two_gene_segments(self):
        """A label with two gene segments expands into one row per segment."""
        multi, multiallelic, overlapping, split_rows_flag, snpmat_added = \
            split_rows_with_multiple_annots(_matrix([TWO_GENES]))

        assert list(snpmat_added.index) == [
            "pos100;GENE1|tag1|f3|gene1|f5|f6|f7|f8|f9",
            "pos100;GENE2|tag2|f3|gene2|f5|f6|f7|f8|f9",
        ]
        assert multi.tolist() == [True, True]
        assert overlapping.tolist() == [True, True]
        assert multiallelic.tolist() == [False, False]
        assert split_rows_flag.tolist() == [1, 1]

    def test_replicas_keep_row_data(self):
        matrix = _matrix([TWO_GENES])

        result = split_rows_with_multiple_annots(matrix)

        assert result.matrix.iloc[0].tolist() == matrix.iloc[0].tolist()
        assert result.matrix.iloc[1].tolist() == matrix.iloc[0].tolist()

    def test_multiallelic_narrowed_per_replica(self, annotations):
        """Replica 2 of '> A,C' reports '> C functional='."""
        label = annotations.multiallelic(pos=300, alts=("A", "C"))

        result = split_rows_with_multiple_annots(_matrix([label]))

        first, second = result.matrix.index
        assert "> A functional=NON_SYNONYMOUS" in first
        assert "> C functional=NON_SYNONYMOUS" in second
        assert second.endswith(";C|missense_variant|MODERATE|geneA|geneA|transcript|geneA|protein_coding|1/1|")
        assert result.multiallelic_mask.tolist() == [True, True]
        assert result.multi_annot_mask.tolist() == [True, True]
        assert result.overlapping_gene_mask.tolist() == [False, False]
        assert result.unresolved == []

    def test_overlapping_genes_same_allele(self, annotations):
        label = annotations.overlapping(pos=200, genes=("geneA", "geneB", "geneC"))

        result = split_rows_with_multiple_annots(_matrix([label]))

        assert len(result.matrix) == 3
        assert [name.split("|")[3] for name in result.matrix.index] == ["geneA", "geneB", "geneC"]
        assert result.overlapping_gene_mask.all()
        assert result.replica_index.tolist() == [0, 1, 2]

    def test_single_event_unchanged(self, annotations):
        label = annotations.single()

        result = split_rows_with_multiple_annots(_matrix([label]))

        assert list(result.matrix.index) == [label]
        assert result.multi_annot_mask.tolist() == [False]
        assert result.split_rows_flag.tolist() == [1]

    def test_row_without_divider_kept_once(self):
        label = "intergenic;N|x|y|z;"

        result = split_rows_with_multiple_annots(_matrix([label]))

        assert list(result.matrix.index) == [label]
        assert result.replica_counts.tolist() == [1]


class TestSplitProperties:
    @pytest.fixture
    def split(self, annotations):
        labels = [
            annotations.single(pos=100),
            annotations.multiallelic(pos=300),
            annotations.single(pos=400),
            annotations.overlapping(pos=500, genes=("geneA", "geneB", "geneC")),
        ]
        return labels, split_rows_with_multiple_annots(_matrix(labels))

    def test_provenance_flag(self, split):
        """Input rows 1..4 holding 1, 2, 1 and 3 events."""
        _, result = split
        assert result.split_rows_flag.tolist() == [1, 2, 2, 3, 4, 4, 4]
        assert result.replica_index.tolist() == [0, 0, 1, 0, 0, 1, 2]

    def test_provenance_monotonic(self, split):
        labels, result = split
        flags = result.split_rows_flag
        assert (np.diff(flags) >= 0).all()
        assert pd.unique(flags).tolist() == list(range(1, len(labels) + 1))

    def test_conservation(self, split):
        labels, result = split
        assert sum(max(count_dividers(label), 1) for label in labels) == len(result.matrix)
        assert result.replica_counts.sum() == len(result.matrix)

    def test_mask_lengths(self, split):
        _, result = split
        rows = len(result.matrix)
        assert len(result.multi_annot_mask) == rows
        assert len(result.multiallelic_mask) == rows
        assert len(result.overlapping_gene_mask) == rows

    def test_overlapping_implies_multi(self, split):
        _, result = split
        assert not (result.overlapping_gene_mask & ~result.multi_annot_mask).any()

    def test_labels_describe_single_event(self, split):
        _, result = split
        for label in result.matrix.index:
            assert count_dividers(label) == 1

    def test_provenance_frame(self, split):
        _, result = split
        frame = result.provenance_frame()
        assert list(frame.columns) == [
            "split_rows_flag", "replica_index", "multiple_annotations",
            "multiallelic_site", "overlapping_genes",
        ]
        assert frame.index.equals(result.matrix.index)

    def test_unpacks_in_contract_order(self, split):
        _, result = split
        assert isinstance(result, SplitResult)
        unpacked = list(result)
        assert unpacked[3] is result.split_rows_flag
        assert unpacked[4] is result.matrix


class TestUnresolvedLabels:
    def test_empty_segment_reported(self):
        """An empty gene segment cannot be rendered and is kept unchanged."""
        label = "pos;A|b|c|g1|e|f|g|h|i|;;C|b|c|g2|e|f|g|h|i|;"

        result = split_rows_with_multiple_annots(_matrix([label]))

        assert len(result.matrix) == 2
        assert result.matrix.index[0] == "pos;A|b|c|g1|e|f|g|h|i|"
        assert result.matrix.index[1] == label
        assert result.unresolved == [label]

    def test_strict_raises(self):
        label = "pos;A|b|c|g1|e|f|g|h|i|;;C|b|c|g2|e|f|g|h|i|;"

        with pytest.raises(UnresolvableAnnotationField):
            split_rows_with_multiple_annots(_matrix([label]), strict=True)

    def test_empty_matrix(self):
        result = split_rows_with_multiple_annots(_matrix([]))
        assert result.matrix.empty
        assert result.split_rows_flag.tolist() == []

    def test_unresolved_multiallelic_replica_not_narrowed(self):
        """A replica without its own gene segment keeps the full label and is reported once."""
        label = (
            "SNP > A,C functional=X locus_tag=KP_1 Strand Information: KP_1=+;"
            "A|b|c|g1|e|f|g|h|i|;;C|b|c|g1|e|f|g|h|i|;"
        )

        result = split_rows_with_multiple_annots(_matrix([label]))

        assert result.matrix.index[0] == (
            "SNP > A functional=X locus_tag=KP_1 Strand Information: KP_1=+;A|b|c|g1|e|f|g|h|i|"
        )
        assert result.matrix.index[1] == label
        assert result.unresolved == [label]
