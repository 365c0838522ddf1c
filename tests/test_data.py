"""
Tests for data preparation, the stratified split and descriptive summaries.
"""

import numpy as np
import pandas as pd
import pytest

from diabetes_risk.analysis.descriptive import DescriptiveSummarizer
from diabetes_risk.data.loader import NHANESDataLoader
from diabetes_risk.data.splitting import stratified_split
from diabetes_risk.data.synthetic import SyntheticNHANESGenerator
from diabetes_risk.exceptions import MissingDataError


def _raw_frame():
    return pd.DataFrame({
        'Diabetes': ['Yes', 'No', 'No', None, 'Yes', 'No'],
        'Age': [60, 35, 48, 52, 71, 29],
        'Gender': ['male', 'female', 'male', 'female', 'female', 'male'],
        'BMI': [33.1, 24.0, np.nan, 28.2, 30.5, 22.9],
        'BPSysAve': [140, 118, 126, 131, 150, 112],
        'PhysActive': ['No', 'Yes', 'Yes', 'No', 'No', 'Yes'],
        'Weight': [95.0, 64.0, 80.0, 77.0, 70.0, 68.0],
    })


class TestDataPreparation:
    """Variable selection, complete-case exclusion and outcome recode."""

    def test_complete_records_only(self, prepared_data, raw_survey):
        assert not prepared_data.isna().any().any()
        assert 0 < len(prepared_data) < len(raw_survey)

    def test_binary_outcome(self, prepared_data):
        assert set(prepared_data['diabetes'].unique()) == {0, 1}

    def test_selected_columns(self, prepared_data):
        assert list(prepared_data.columns) == [
            'diabetes', 'age', 'gender', 'bmi', 'bp_sys_ave', 'phys_active'
        ]

    def test_column_order_independent_of_input(self):
        raw = _raw_frame()
        df = NHANESDataLoader(raw_data=raw[raw.columns[::-1]], verbose=False).preprocess_data()
        assert list(df.columns) == [
            'diabetes', 'age', 'gender', 'bmi', 'bp_sys_ave', 'phys_active'
        ]

    def test_small_frame(self):
        loader = NHANESDataLoader(raw_data=_raw_frame(), verbose=False)
        df = loader.preprocess_data()

        assert len(df) == 4
        assert df['diabetes'].tolist() == [1, 0, 1, 0]
        assert 'Weight' not in df.columns
        assert loader.missing_summary['complete_cases'] == 4
        assert loader.missing_summary['incomplete_cases'] == 2
        assert loader.missing_summary['missing_by_column'] == {'diabetes': 1, 'bmi': 1}

    def test_outcome_other_than_yes_is_negative(self):
        raw = _raw_frame()
        raw.loc[1, 'Diabetes'] = 'Borderline'
        df = NHANESDataLoader(raw_data=raw, verbose=False).preprocess_data()
        assert df['diabetes'].tolist() == [1, 0, 1, 0]

    def test_unknown_category_excluded(self):
        raw = _raw_frame()
        raw.loc[0, 'Gender'] = 'unknown'
        df = NHANESDataLoader(raw_data=raw, verbose=False).preprocess_data()
        assert len(df) == 3
        assert set(df['gender'].astype(str)) <= {'female', 'male'}

    def test_non_numeric_values_excluded(self):
        raw = _raw_frame()
        raw['Age'] = raw['Age'].astype(object)
        raw.loc[1, 'Age'] = 'n/a'
        df = NHANESDataLoader(raw_data=raw, verbose=False).preprocess_data()
        assert len(df) == 3

    def test_missing_required_column(self):
        raw = _raw_frame().drop(columns='BPSysAve')
        with pytest.raises(MissingDataError, match="bp_sys_ave"):
            NHANESDataLoader(raw_data=raw, verbose=False).preprocess_data()

    def test_no_complete_records(self):
        raw = _raw_frame()
        raw['BMI'] = np.nan
        with pytest.raises(MissingDataError):
            NHANESDataLoader(raw_data=raw, verbose=False).preprocess_data()

    def test_summary_statistics(self):
        loader = NHANESDataLoader(raw_data=_raw_frame(), verbose=False)
        loader.preprocess_data()
        summary = loader.get_summary_statistics()
        assert summary['total_samples'] == 4
        assert summary['diabetic_cases'] == 2
        assert summary['prevalence_pct'] == 50.0
        assert summary['incomplete_cases'] == 2


class TestDataFiles:
    """Reading survey extracts from disk."""

    def test_csv(self, tmp_path):
        path = tmp_path / "nhanes.csv"
        _raw_frame().to_csv(path, index=False)

        loader = NHANESDataLoader(data_file=path, verbose=False)
        df = loader.preprocess_data()
        assert len(df) == 4
        assert loader.raw_data.shape == (6, 7)

    def test_missing_file(self, tmp_path):
        loader = NHANESDataLoader(data_file=tmp_path / "absent.csv", verbose=False)
        with pytest.raises(FileNotFoundError):
            loader.load_data()

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "nhanes.json"
        path.write_text("{}")
        with pytest.raises(ValueError, match="Unsupported"):
            NHANESDataLoader(data_file=path, verbose=False).load_data()


class TestStratifiedSplit:
    """Train/test partition by outcome label."""

    @pytest.mark.parametrize("seed", [0, 7, 42, 123, 2024])
    def test_positive_share_preserved(self, prepared_data, seed):
        train_df, test_df, stats = stratified_split(prepared_data, random_state=seed,
                                                    verbose=False)
        positives = int(prepared_data['diabetes'].sum())

        assert len(train_df) + len(test_df) == len(prepared_data)
        assert abs(stats['train_positives'] - 0.7 * positives) <= 1
        assert stats['train_positives'] + stats['test_positives'] == positives

    def test_partitions_disjoint(self, prepared_data):
        train_df, test_df, _ = stratified_split(prepared_data, verbose=False)
        assert train_df.index.intersection(test_df.index).empty
        assert train_df.index.is_monotonic_increasing

    def test_same_seed_same_split(self, prepared_data):
        first, _, _ = stratified_split(prepared_data, random_state=11, verbose=False)
        second, _, _ = stratified_split(prepared_data, random_state=11, verbose=False)
        pd.testing.assert_frame_equal(first, second)

    def test_invalid_fraction(self, prepared_data):
        with pytest.raises(ValueError):
            stratified_split(prepared_data, train_fraction=1.0, verbose=False)


class TestSyntheticData:
    """Synthetic extracts use the survey layout."""

    def test_layout(self):
        raw = SyntheticNHANESGenerator.generate(n_samples=200, missing_rate=0.0, random_state=1)
        assert list(raw.columns) == ['Diabetes', 'Age', 'Gender', 'BMI', 'BPSysAve', 'PhysActive']
        assert set(raw['Diabetes']) <= {'Yes', 'No'}
        assert not raw.isna().any().any()

    def test_reproducible(self):
        first = SyntheticNHANESGenerator.generate(n_samples=100, random_state=9)
        second = SyntheticNHANESGenerator.generate(n_samples=100, random_state=9)
        pd.testing.assert_frame_equal(first, second)


class TestDescriptiveSummarizer:
    """Group summaries by diabetes status."""

    @pytest.fixture
    def data(self):
        return pd.DataFrame({
            'diabetes': [0, 0, 0, 1, 1],
            'age': [30.0, 40.0, 50.0, 60.0, 70.0],
            'gender': ['female', 'male', 'female', 'male', 'male'],
            'bmi': [22.0, 24.0, 26.0, 31.0, 35.0],
            'bp_sys_ave': [110.0, 120.0, 130.0, 140.0, 150.0],
            'phys_active': ['Yes', 'Yes', 'No', 'No', 'Yes'],
        })

    def test_summary_by_status(self, data):
        summary = DescriptiveSummarizer(verbose=False).summarize_by_outcome(data)

        assert summary.index.tolist() == ['No', 'Yes']
        assert summary.loc['No', 'n'] == 3
        assert summary.loc['No', 'avg_age'] == 40.0
        assert summary.loc['Yes', 'avg_bmi'] == 33.0
        assert summary.loc['Yes', 'avg_bp'] == 145.0
        assert summary.loc['No', 'pct_active'] == pytest.approx(66.7)
        assert summary.loc['Yes', 'pct_active'] == 50.0

    def test_prevalence(self, data):
        prevalence = DescriptiveSummarizer(verbose=False).prevalence(data)
        assert prevalence == {'n': 5, 'cases': 2, 'prevalence_pct': 40.0}

    def test_complete_case_comparison(self):
        selected = pd.DataFrame({
            'diabetes': ['Yes', 'No', np.nan, 'No'],
            'age': [60.0, 30.0, 50.0, 40.0],
            'gender': ['male', 'female', 'male', 'female'],
            'bmi': [30.0, 22.0, 28.0, np.nan],
            'bp_sys_ave': [140.0, 110.0, 130.0, 120.0],
            'phys_active': ['No', 'Yes', 'Yes', 'No'],
        })
        comparison = DescriptiveSummarizer(verbose=False).compare_complete_cases(selected)

        assert comparison.loc[True, 'n'] == 2
        assert comparison.loc[False, 'n'] == 2
        assert comparison.loc[True, 'mean_age'] == 45.0
        assert comparison.loc[True, 'pct_diabetic'] == 50.0
        # Unknown outcome is left out of the incomplete group's percentage
        assert comparison.loc[False, 'pct_diabetic'] == 0.0
        assert comparison.loc[False, 'mean_bmi'] == 28.0
