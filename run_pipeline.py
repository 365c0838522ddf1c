#!/usr/bin/env python3
"""
Main entry point for the diabetes risk analysis.

Runs the whole pipeline: data preparation, descriptive statistics, logistic
regression, threshold evaluation and result files.
"""

import argparse
import sys
import traceback
import warnings
from pathlib import Path

from diabetes_risk.config.settings import AnalysisConfig, DATA_FILE
from diabetes_risk.data.synthetic import SyntheticNHANESGenerator
from diabetes_risk.pipeline import DiabetesRiskPipeline

warnings.filterwarnings('ignore', category=FutureWarning)


def main():
    """Main function."""
    parser = argparse.ArgumentParser(description='Diabetes Risk Factors Analysis')
    parser.add_argument(
        '--data',
        type=Path,
        default=DATA_FILE,
        help='NHANES-layout CSV or Excel file'
    )
    parser.add_argument(
        '--synthetic',
        type=int,
        metavar='N',
        help='Run on N synthetic NHANES-like records instead of a data file'
    )
    parser.add_argument(
        '--output-dir',
        type=Path,
        help='Root directory for results and figures'
    )

    args = parser.parse_args()

    raw_data = None
    if args.synthetic:
        raw_data = SyntheticNHANESGenerator.generate(
            n_samples=args.synthetic, random_state=AnalysisConfig.RANDOM_SEED
        )

    try:
        pipeline = DiabetesRiskPipeline(
            data_file=args.data,
            raw_data=raw_data,
            random_state=AnalysisConfig.RANDOM_SEED,
            output_dir=args.output_dir
        )
        pipeline.run_complete_pipeline()
    except Exception as e:
        print(f"\n❌ PIPELINE FAILED: {str(e)}")
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
