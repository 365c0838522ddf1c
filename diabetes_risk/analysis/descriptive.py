"""
Descriptive statistics by diabetes status.
"""

import pandas as pd
from typing import Dict, Any

from ..config.settings import AnalysisConfig


class DescriptiveSummarizer:
    """
    Group-wise summaries of the prepared dataset.

    Provides the per-status summary table, the overall prevalence and a
    comparison of complete and incomplete records for exclusion bias.
    """

    def __init__(self, outcome: str = AnalysisConfig.OUTCOME, verbose: bool = True):
        """
        Initialize the summarizer.

        Args:
            outcome: Binary outcome column
            verbose: Whether to print the tables
        """
        self.outcome = outcome
        self.verbose = verbose

    def summarize_by_outcome(self, data: pd.DataFrame) -> pd.DataFrame:
        """
        Means and percentages per diabetes status.

        Args:
            data: Prepared dataset

        Returns:
            DataFrame indexed by status ('No', 'Yes') with n, avg_age, avg_bmi,
            avg_bp and pct_active
        """
        status = data[self.outcome].map({0: 'No', 1: 'Yes'}).rename('diabetes_status')
        active = (data['phys_active'].astype(str) == 'Yes').astype(float)

        summary = (
            data.assign(_active=active)
            .groupby(status)
            .agg(
                n=('age', 'size'),
                avg_age=('age', 'mean'),
                avg_bmi=('bmi', 'mean'),
                avg_bp=('bp_sys_ave', 'mean'),
                pct_active=('_active', 'mean'),
            )
        )
        summary['pct_active'] = summary['pct_active'] * 100
        summary = summary.round({'avg_age': 1, 'avg_bmi': 1, 'avg_bp': 1, 'pct_active': 1})

        if self.verbose:
            print(summary.to_string())

        return summary

    def prevalence(self, data: pd.DataFrame) -> Dict[str, Any]:
        n = len(data)
        cases = int(data[self.outcome].sum())
        return {
            'n': n,
            'cases': cases,
            'prevalence_pct': round(cases / n * 100, 1) if n else float('nan'),
        }

    def compare_complete_cases(self, selected: pd.DataFrame,
                               positive_label: str = AnalysisConfig.POSITIVE_LABEL) -> pd.DataFrame:
        """
        Compare complete and incomplete records before exclusion.

        Args:
            selected: Analysis variables before incomplete records are dropped,
                with the outcome still in its raw form
            positive_label: Raw outcome value marking a case

        Returns:
            DataFrame indexed by complete (False/True) with n, mean_age,
            mean_bmi and pct_diabetic
        """
        complete = selected.notna().all(axis=1).rename('complete')
        outcome = selected[self.outcome]
        diabetic = (outcome.astype(str) == positive_label).astype(float).where(outcome.notna())

        comparison = (
            selected.assign(_diabetic=diabetic)
            .groupby(complete)
            .agg(
                n=('age', 'size'),
                mean_age=('age', 'mean'),
                mean_bmi=('bmi', 'mean'),
                pct_diabetic=('_diabetic', 'mean'),
            )
        )
        comparison['pct_diabetic'] = comparison['pct_diabetic'] * 100

        if self.verbose:
            print(comparison.to_string())

        return comparison
