"""Tests for cleaning statistics and the removal summary plot."""

import plotly.graph_objects as go
import pytest

from varmat_utils.bug_filters import RemovedRow
from varmat_utils.cleaning_statistics import (
    compute_removal_statistics,
    compute_split_statistics,
    print_statistics,
    summary_frame,
)
from varmat_utils.plot_utils import apply_stage_colors, plot_removal_summary
from varmat_utils.workflow import clean_variant_matrices


@pytest.fixture
def removed():
    return [
        RemovedRow("a", "warning", ""),
        RemovedRow("b", "warning", ""),
        RemovedRow("c", "none_annotation", ""),
        RemovedRow("d", "no_variants", ""),
    ]


class TestRemovalStatistics:
    def test_counts_per_stage(self, removed):
        stats = compute_removal_statistics(removed, input_rows=10)

        assert stats['removed_rows'] == 4
        assert stats['remaining_rows'] == 6
        assert stats['removal_rate'] == pytest.approx(40.0)
        assert list(stats['by_stage']) == [
            "warning", "pipe_count", "chr_end", "missing_locus_info", "none_annotation", "no_variants"
        ]
        assert stats['by_stage']['warning'] == 2
        assert stats['by_stage']['chr_end'] == 0

    def test_no_input_rows(self):
        stats = compute_removal_statistics([], input_rows=0)
        assert stats['removal_rate'] == 0.0

    def test_summary_frame(self, removed):
        frame = summary_frame(compute_removal_statistics(removed, 10))

        assert list(frame.columns) == ['Stage', 'Description', 'Count']
        assert frame['Count'].sum() == 4
        assert len(frame) == 6


class TestSplitStatistics:
    def test_split_counts(self, mixed_pair):
        result = clean_variant_matrices(*mixed_pair)

        stats = compute_split_statistics(result.split)

        assert stats == {
            'input_rows': 3,
            'output_rows': 5,
            'split_groups': 2,
            'multiple_annotation_rows': 4,
            'multiallelic_rows': 2,
            'overlapping_gene_rows': 2,
            'unresolved': 0,
        }


class TestPrintStatistics:
    def test_removal_output(self, removed, capsys):
        print_statistics(compute_removal_statistics(removed, 10), 'removal')
        out = capsys.readouterr().out
        assert "Removal statistics" in out
        assert "Remaining rows: 6 (40.0% removed)" in out

    def test_unknown_operation(self, removed):
        with pytest.raises(ValueError):
            print_statistics(compute_removal_statistics(removed, 10), 'merge')


class TestRemovalPlot:
    def test_bar_per_stage(self, removed):
        fig = plot_removal_summary(summary_frame(compute_removal_statistics(removed, 10)))

        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 1
        assert list(fig.data[0].y) == [2, 0, 0, 0, 1, 1]

    def test_empty_summary(self):
        fig = plot_removal_summary(summary_frame(compute_removal_statistics([], 0)))
        assert list(fig.data[0].y) == [0, 0, 0, 0, 0, 0]

    def test_unknown_stage_is_gray(self):
        assert apply_stage_colors(["warning", "other"])[1] == "#8A8A8A"
