#!/usr/bin/env python3
"""
Main script for running tensile test analysis.
"""

# Pipeline overview:
# 1) Read the CSV export and detect its column layout (strain/stress,
#    exx/eyy, or both).
# 2) Estimate the elastic modulus from the second and third points and locate
#    the offset yield point by exact segment/offset-line intersection.
# 3) Report UTS (first maximum stress), fracture point and trapezoidal
#    toughness.
# 4) Fit exx against eyy when gauge columns are present.
# 5) Print the labelled results and export result tables for plotting.

import argparse
import logging
import os
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ductile.analysis import FRACTURE_METHODS
from ductile.errors import DuctileError
from ductile.output import offset_line_frame, save_data_to_csv
from ductile.reporting import (
    create_results_dataframe,
    format_analysis_report,
    format_regression_report,
    write_report_file,
)
from ductile.session import AnalysisSession
from ductile.units import DEFAULT_OFFSET_PERCENT

DEFAULT_OUTPUT_DIR = "output"


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("tensile_analysis.log", mode="w"),
        ],
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build command-line parser for script execution."""
    parser = argparse.ArgumentParser(
        description="Yield, UTS, fracture, toughness and exx/eyy regression "
        "from a tensile test CSV."
    )
    parser.add_argument("input", help="Path to input CSV file.")
    parser.add_argument(
        "--offset",
        type=float,
        default=DEFAULT_OFFSET_PERCENT,
        help=f"Offset strain in percent (default: {DEFAULT_OFFSET_PERCENT}).",
    )
    parser.add_argument(
        "--fracture-method",
        choices=FRACTURE_METHODS,
        default="last",
        help="Fracture point rule (default: last).",
    )
    parser.add_argument(
        "--outdir",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Print results only; do not write CSV or text outputs.",
    )
    return parser


def main(argv=None):
    """Main execution function with step timing logs."""
    args = _build_arg_parser().parse_args(argv)
    _configure_logging()

    start_time = time.time()
    logging.info("Initializing tensile analysis pipeline")

    session = AnalysisSession()
    try:
        with open(args.input, encoding="utf-8-sig") as fh:
            dataset = session.load(fh.read())
    except (OSError, DuctileError) as exc:
        logging.error("Could not load %s: %s", args.input, exc)
        return 1
    logging.info(
        "Loaded %d data points from %s (%d rows skipped)",
        len(dataset),
        args.input,
        len(session.row_errors),
    )

    step_start = time.time()
    try:
        result = session.analyze(args.offset, fracture_method=args.fracture_method)
    except DuctileError as exc:
        logging.error("Analysis failed: %s", exc)
        return 1
    logging.info("Curve analysis completed in %.3f seconds", time.time() - step_start)

    lines = format_analysis_report(result)

    regression = None
    if dataset.gauge_count > 0:
        try:
            regression = session.fit_regression()
        except DuctileError as exc:
            logging.warning("Regression skipped: %s", exc)
        else:
            lines.extend(format_regression_report(regression))

    for line in lines:
        print(line)

    if not args.no_export:
        results_df = create_results_dataframe(
            result, regression, source=os.path.basename(args.input)
        )
        offset_df = offset_line_frame(session.offset_line())
        save_data_to_csv(
            results_df, dataset.to_frame(), offset_df, output_dir=args.outdir
        )
        summary_path = write_report_file(lines, args.outdir)
        logging.info("  - Summary: %s", summary_path)

    logging.info(f"Total execution time: {time.time() - start_time:.2f} seconds")
    logging.info("Analysis pipeline completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
