#!/usr/bin/env python3
"""
Variant Matrix Cleaning Script

Cleans a code/allele variant matrix pair written by the variant annotation
pipeline so that downstream phylogenetic analyses operate on well-formed rows.

This script:
1. Removes rows whose annotations carry known bugs (warnings, malformed pipe
   counts, CHR_END, missing locus tag/strand, None)
2. Removes rows without variation across samples (including fully masked rows)
3. Splits rows with multiple annotations (multiallelic sites, overlapping
   genes) into one row per event
4. Writes the cleaned matrices, the split provenance table and dated audit
   logs of every removed row
"""

import argparse
import sys
from pathlib import Path

# Add varmat_utils to path
script_dir = Path(__file__).parent
sys.path.insert(0, str(script_dir))

from varmat_common.cleaning_config import CleaningConfig
from varmat_common.validators import ValidationError
from varmat_utils.cleaning_statistics import print_statistics, summary_frame
from varmat_utils.error_handler import ErrorHandler, VarmatError
from varmat_utils.io_utils import (
    get_pair_name,
    read_variant_matrix,
    write_split_provenance,
    write_variant_matrix,
)
from varmat_utils.logging_config import get_operational_logger
from varmat_utils.workflow import clean_variant_matrices


def argparser(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Remove buggy and invariant rows from a variant matrix pair and split rows with multiple annotations',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        '-c', '--code',
        type=str,
        required=True,
        help='Code matrix (numeric -4..3), annotations in the first column'
    )
    parser.add_argument(
        '-a', '--allele',
        type=str,
        required=True,
        help='Allele matrix (A, C, G, T, N, -), annotations in the first column'
    )
    parser.add_argument(
        '-o', '--outdir',
        type=str,
        default='.',
        help='Output directory for cleaned matrices and provenance table'
    )
    parser.add_argument(
        '--name',
        type=str,
        default=None,
        help='Matrix name used in output and audit log names (default: derived from --allele)'
    )
    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Directory for dated audit logs (default: --outdir)'
    )
    parser.add_argument(
        '--no-audit-logs',
        action='store_true',
        help='Do not write dated audit logs of removed rows'
    )
    parser.add_argument(
        '--metrics',
        type=str,
        default=None,
        help='Write a JSON metrics report to this path'
    )
    parser.add_argument(
        '--plot',
        type=str,
        default=None,
        help='Write an HTML bar chart of removed rows per stage to this path'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main cleaning workflow."""
    args = argparser(argv)
    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    name = args.name or get_pair_name(args.allele)

    op_logger = get_operational_logger(name='varmat_clean', log_level=args.log_level)
    op_logger.attach('varmat_utils')
    error_handler = ErrorHandler()

    config = CleaningConfig(
        log_dir=Path(args.log_dir) if args.log_dir else outdir,
        matrix_name=name,
        write_logs=not args.no_audit_logs,
        log_level=args.log_level,
    )

    print("=" * 80)
    print("Variant Matrix Cleaning")
    print("=" * 80)
    print(f"\nCode matrix:   {args.code}")
    print(f"Allele matrix: {args.allele}")
    print(f"Output dir:    {outdir}")

    try:
        snpmat_code = read_variant_matrix(args.code)
        snpmat_allele = read_variant_matrix(args.allele)
        op_logger.log_event("matrices_loaded", {
            "rows": snpmat_allele.shape[0],
            "samples": snpmat_allele.shape[1],
        })
        result = clean_variant_matrices(snpmat_code, snpmat_allele, config, op_logger)

        code_path = write_variant_matrix(result.code_matrix, outdir / f"{name}_code.cleaned.tsv")
        allele_path = write_variant_matrix(result.allele_matrix, outdir / f"{name}_allele.cleaned.tsv")
        provenance_path = write_split_provenance(result.split, outdir / f"{name}_split_provenance.tsv")
    except (VarmatError, ValidationError, OSError) as e:
        error_handler.handle_error(e, "cleaning variant matrices")
        print(f"\nERROR: {e}", file=sys.stderr)
        return 1

    stats = result.statistics()
    print_statistics(stats['removal'], 'removal')
    print_statistics(stats['split'], 'split')

    if args.plot:
        from varmat_utils.plot_utils import plot_removal_summary
        fig = plot_removal_summary(summary_frame(stats['removal']), title=f"Rows removed from {name}")
        fig.write_html(args.plot)
        print(f"\nPlot:          {args.plot}")

    if args.metrics:
        op_logger.save_metrics_report(Path(args.metrics))

    print(f"\nCleaned code matrix:   {code_path}")
    print(f"Cleaned allele matrix: {allele_path}")
    print(f"Split provenance:      {provenance_path}")
    for log_path in result.log_paths:
        print(f"Audit log:             {log_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
