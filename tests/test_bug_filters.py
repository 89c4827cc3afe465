"""Tests for the ordered row bug filter."""

import pandas as pd
import pytest

from varmat_utils.bug_filters import RemovedRow, find_rows_with_bugs, remove_rows_with_bugs

SEGMENT = "A|missense_variant|MODERATE|geneA|geneA|transcript|geneA|protein_coding|1/1|"


def _matrix(labels):
    return pd.DataFrame({"S1": ["A"] * len(labels), "S2": ["C"] * len(labels)}, index=labels)


class TestBugStages:
    def test_warning_removed_and_logged(self, annotations):
        """A WARNING row is dropped and its label is logged verbatim."""
        warning = annotations.single(pos=110, kind="WARNING: low coverage Coding SNP")
        clean = annotations.single(pos=100)

        cleaned, removed = remove_rows_with_bugs(_matrix([clean, warning]))

        assert list(cleaned.index) == [clean]
        assert removed == [RemovedRow(warning, "warning", removed[0].reason)]

    def test_pipe_count_seventeen(self):
        """17 pipes over two gene segments is not a multiple of 9 per segment."""
        label = "pos;A|b|c|d|e|f|g|h|i|;C|b|c|d|e|f|g|h|;"

        cleaned, removed = remove_rows_with_bugs(_matrix([label]))

        assert cleaned.empty
        assert removed[0].stage == "pipe_count"

    def test_single_semicolon_is_malformed(self):
        label = f"pos;{SEGMENT}"

        _, removed = remove_rows_with_bugs(_matrix([label]))

        assert [record.stage for record in removed] == ["pipe_count"]

    def test_label_without_semicolons_kept(self):
        """A label with no gene segments and no pipes passes the pipe count stage."""
        label = "intergenic at 5 > A"

        cleaned, removed = remove_rows_with_bugs(_matrix([label]))

        assert list(cleaned.index) == [label]
        assert removed == []

    def test_chr_end(self, annotations):
        label = annotations.single(kind="CHR_END Coding SNP")
        _, removed = remove_rows_with_bugs(_matrix([label]))
        assert [record.stage for record in removed] == ["chr_end"]

    def test_null_locus_tag(self, annotations):
        label = annotations.single(locus_tag="NULL")
        _, removed = remove_rows_with_bugs(_matrix([label]))
        assert [record.stage for record in removed] == ["missing_locus_info"]

    def test_no_strand_information(self):
        label = f"Coding SNP at 5 > A locus_tag=KP_1 No Strand Information found;{SEGMENT};"
        _, removed = remove_rows_with_bugs(_matrix([label]))
        assert [record.stage for record in removed] == ["missing_locus_info"]

    def test_none_annotation(self, annotations):
        label = annotations.single(functional="None")
        _, removed = remove_rows_with_bugs(_matrix([label]))
        assert [record.stage for record in removed] == ["none_annotation"]


class TestBugFilterBehaviour:
    def test_first_matching_stage_wins(self, annotations):
        """A row matching several bug classes is removed once, by the earliest stage."""
        label = annotations.single(kind="WARNING CHR_END", locus_tag="NULL")

        _, removed = remove_rows_with_bugs(_matrix([label]))

        assert len(removed) == 1
        assert removed[0].stage == "warning"

    def test_removed_rows_grouped_by_stage(self, annotations):
        none_row = annotations.single(pos=1, functional="None")
        chr_end_row = annotations.single(pos=2, kind="CHR_END")
        warning_row = annotations.single(pos=3, kind="WARNING")

        _, removed = remove_rows_with_bugs(_matrix([none_row, chr_end_row, warning_row]))

        assert [record.stage for record in removed] == ["warning", "chr_end", "none_annotation"]

    def test_survivors_keep_order_and_data(self, annotations):
        labels = [annotations.single(pos=pos) for pos in (30, 10, 20)]
        matrix = pd.DataFrame({"S1": ["A", "C", "G"], "S2": ["T", "T", "T"]}, index=labels)

        cleaned, removed = remove_rows_with_bugs(matrix)

        assert removed == []
        pd.testing.assert_frame_equal(cleaned, matrix)
        assert cleaned is not matrix

    def test_idempotent(self, mixed_pair):
        """Filtering the filtered matrix removes nothing."""
        _, snpmat_allele = mixed_pair

        once, removed = remove_rows_with_bugs(snpmat_allele)
        twice, removed_again = remove_rows_with_bugs(once)

        assert len(removed) == 3
        assert removed_again == []
        pd.testing.assert_frame_equal(once, twice)

    def test_code_and_allele_drop_same_rows(self, mixed_pair):
        snpmat_code, snpmat_allele = mixed_pair

        code_cleaned, _ = remove_rows_with_bugs(snpmat_code)
        allele_cleaned, _ = remove_rows_with_bugs(snpmat_allele)

        assert list(code_cleaned.index) == list(allele_cleaned.index)

    def test_log_sink_is_extended(self, annotations):
        sink = [RemovedRow("earlier", "no_variants", "from another stage")]
        label = annotations.single(kind="WARNING")

        _, returned = remove_rows_with_bugs(_matrix([label]), log=sink)

        assert returned is sink
        assert [record.annotation for record in sink] == ["earlier", label]

    def test_empty_matrix(self):
        cleaned, removed = remove_rows_with_bugs(_matrix([]))
        assert cleaned.empty
        assert removed == []


class TestFindRowsWithBugs:
    def test_dry_run_matches_removal(self, mixed_pair):
        _, snpmat_allele = mixed_pair

        found = find_rows_with_bugs(snpmat_allele.index)
        _, removed = remove_rows_with_bugs(snpmat_allele)

        assert found == removed

    def test_record_to_dict(self):
        record = RemovedRow("pos;A|b;", "pipe_count", "bad pipes")
        assert record.to_dict() == {"annotation": "pos;A|b;", "stage": "pipe_count", "reason": "bad pipes"}

    @pytest.mark.parametrize("kind", ["WARNING", "CHR_END"])
    def test_labels_only(self, annotations, kind):
        assert len(find_rows_with_bugs([annotations.single(kind=kind)])) == 1
