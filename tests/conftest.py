"""
Shared fixtures for diabetes risk tests.

Run with: pytest tests -v
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np  # noqa: E402
import pytest  # noqa: E402

from diabetes_risk.config.settings import AnalysisConfig  # noqa: E402
from diabetes_risk.data.loader import NHANESDataLoader  # noqa: E402
from diabetes_risk.data.splitting import stratified_split  # noqa: E402
from diabetes_risk.data.synthetic import SyntheticNHANESGenerator  # noqa: E402
from diabetes_risk.models.regression import LogisticRiskModeler  # noqa: E402

TOY_LABELS = np.array([1, 1, 1, 0, 0, 0, 0, 0, 0, 0])
TOY_SCORES = np.array([0.9, 0.2, 0.05, 0.8, 0.5, 0.3, 0.1, 0.05, 0.02, 0.01])


@pytest.fixture
def toy_labels():
    return TOY_LABELS.copy()


@pytest.fixture
def toy_scores():
    return TOY_SCORES.copy()


@pytest.fixture(scope="session")
def raw_survey():
    """Synthetic NHANES-layout extract with missing values."""
    return SyntheticNHANESGenerator.generate(n_samples=2000, missing_rate=0.05,
                                             random_state=AnalysisConfig.RANDOM_SEED)


@pytest.fixture(scope="session")
def prepared_data(raw_survey):
    loader = NHANESDataLoader(raw_data=raw_survey, verbose=False)
    return loader.preprocess_data()


@pytest.fixture(scope="session")
def split_data(prepared_data):
    train_df, test_df, _ = stratified_split(prepared_data, random_state=AnalysisConfig.RANDOM_SEED,
                                            verbose=False)
    return train_df, test_df


@pytest.fixture(scope="session")
def fitted_model(split_data):
    train_df, _ = split_data
    return LogisticRiskModeler(verbose=False).fit(train_df)
