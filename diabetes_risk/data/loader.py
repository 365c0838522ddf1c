"""
Data loading and preparation module for diabetes risk analysis.
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Dict, Any, List

from ..config.settings import DATA_FILE, COLUMN_MAPPING, AnalysisConfig
from ..exceptions import MissingDataError


class NHANESDataLoader:
    """
    Data loader and preparer for NHANES diabetes analysis.

    This class handles loading the survey extract, restricting it to the
    analysis variables, excluding incomplete records and recoding the outcome
    to a binary label.
    """

    def __init__(self, data_file: Optional[Path] = None,
                 raw_data: Optional[pd.DataFrame] = None,
                 verbose: bool = True):
        """
        Initialize the data loader.

        Args:
            data_file: Path to the data file. If None, uses default from config.
            raw_data: Already loaded raw table. Takes precedence over data_file.
            verbose: Whether to print progress information
        """
        self.data_file = Path(data_file) if data_file is not None else DATA_FILE
        self.raw_data = raw_data
        self.verbose = verbose
        self.selected_data = None
        self.processed_data = None
        self.missing_summary = None

    @property
    def required_columns(self) -> List[str]:
        # Survey column order: outcome first, then predictors as they appear in the extract
        return list(COLUMN_MAPPING.values())

    def load_data(self) -> pd.DataFrame:
        """
        Load raw data from a CSV or Excel file.

        Returns:
            DataFrame with raw data
        """
        if not self.data_file.exists():
            raise FileNotFoundError(f"Data file not found: {self.data_file}")

        suffix = self.data_file.suffix.lower()
        if suffix in ('.xlsx', '.xls'):
            self.raw_data = pd.read_excel(self.data_file)
        elif suffix == '.csv':
            self.raw_data = pd.read_csv(self.data_file)
        else:
            raise ValueError(f"Unsupported data file type: {suffix}")

        if self.verbose:
            print(f"Loaded data with shape: {self.raw_data.shape}")
        return self.raw_data

    def preprocess_data(self) -> pd.DataFrame:
        """
        Select analysis variables, drop incomplete records and recode the outcome.

        Returns:
            DataFrame with one complete record per respondent
        """
        if self.raw_data is None:
            self.load_data()

        df = self.raw_data.copy()

        # Rename columns to snake_case for easier handling
        df = df.rename(columns=COLUMN_MAPPING)

        missing_cols = [c for c in self.required_columns if c not in df.columns]
        if missing_cols:
            raise MissingDataError(f"Required columns not found: {missing_cols}")

        df = df[self.required_columns].copy()

        df = self._convert_data_types(df)
        self.selected_data = df

        self.missing_summary = self._summarize_missing(df)

        df = self._drop_incomplete(df)
        df = self._recode_outcome(df)

        self.processed_data = df.reset_index(drop=True)

        if self.verbose:
            prevalence = self.processed_data[AnalysisConfig.OUTCOME].mean() * 100
            print(f"Final dataset: {len(self.processed_data)} observations")
            print(f"Diabetes prevalence: {prevalence:.1f} %")

        return self.processed_data

    def _convert_data_types(self, df: pd.DataFrame) -> pd.DataFrame:
        """Convert data types; values outside known levels become missing."""

        for col in AnalysisConfig.NUMERIC_PREDICTORS:
            df[col] = pd.to_numeric(df[col], errors='coerce')

        for col, levels in AnalysisConfig.CATEGORICAL_LEVELS.items():
            df[col] = pd.Categorical(df[col], categories=list(levels))

        return df

    def _summarize_missing(self, df: pd.DataFrame) -> Dict[str, Any]:
        """Count complete and incomplete records."""
        complete = df.notna().all(axis=1)
        missing_stats = df.isnull().sum()

        summary = {
            'complete_cases': int(complete.sum()),
            'incomplete_cases': int((~complete).sum()),
            'missing_by_column': missing_stats[missing_stats > 0].to_dict(),
        }

        if self.verbose:
            print("Missing data summary:")
            print(f"Complete cases: {summary['complete_cases']}")
            print(f"Incomplete cases: {summary['incomplete_cases']}")

        return summary

    def _drop_incomplete(self, df: pd.DataFrame) -> pd.DataFrame:
        """Exclude records lacking any required field."""
        initial_count = len(df)
        df = df.dropna()

        if df.empty:
            raise MissingDataError("No complete records remain after excluding missing values")

        filtered_count = initial_count - len(df)
        if filtered_count > 0 and self.verbose:
            print(f"Excluded {filtered_count} incomplete records")

        return df

    def _recode_outcome(self, df: pd.DataFrame) -> pd.DataFrame:
        """Recode the outcome to 1 for a positive answer and 0 otherwise."""
        outcome = AnalysisConfig.OUTCOME
        df[outcome] = (df[outcome].astype(str) == AnalysisConfig.POSITIVE_LABEL).astype(int)
        return df

    def get_summary_statistics(self) -> Dict[str, Any]:
        """
        Get summary statistics of the processed data.

        Returns:
            Dictionary with summary statistics
        """
        if self.processed_data is None:
            self.preprocess_data()

        df = self.processed_data
        outcome = df[AnalysisConfig.OUTCOME]

        summary = {
            'total_samples': len(df),
            'diabetic_cases': int(outcome.sum()),
            'prevalence_pct': round(float(outcome.mean() * 100), 1),
            'gender_distribution': df['gender'].value_counts().to_dict(),
            'age_range': {
                'min': df['age'].min(),
                'max': df['age'].max(),
                'mean': df['age'].mean()
            },
            'bmi_range': {
                'min': df['bmi'].min(),
                'max': df['bmi'].max(),
                'mean': df['bmi'].mean()
            }
        }

        if self.missing_summary is not None:
            summary.update({
                'complete_cases': self.missing_summary['complete_cases'],
                'incomplete_cases': self.missing_summary['incomplete_cases'],
            })

        return summary
