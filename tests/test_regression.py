"""
Tests for the design matrix, logistic regression fit and VIF check.
"""

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm

from diabetes_risk.exceptions import FitConvergenceError, MissingDataError
from diabetes_risk.models.regression import (
    INTERCEPT,
    LogisticRiskModeler,
    StatsmodelsGLMRegressor,
    build_design_matrix,
    calculate_vif,
    score_records,
)
from diabetes_risk.config.settings import AnalysisConfig
from diabetes_risk.utils.reporting import ResultsReporter, key_findings, load_model


def _records():
    return pd.DataFrame({
        'age': [30.0, 50.0, 65.0, 42.0],
        'bmi': [22.0, 31.0, 27.5, 35.0],
        'bp_sys_ave': [115.0, 130.0, 142.0, 125.0],
        'gender': ['female', 'male', 'male', 'female'],
        'phys_active': ['Yes', 'No', 'No', 'Yes'],
    })


class TestDesignMatrix:
    """Treatment coding against the fixed reference levels."""

    def test_columns(self):
        design = build_design_matrix(_records(), AnalysisConfig.NUMERIC_PREDICTORS,
                                     AnalysisConfig.CATEGORICAL_LEVELS)
        assert set(design.columns) == {
            INTERCEPT, 'age', 'bmi', 'bp_sys_ave', 'gender[T.male]', 'phys_active[T.Yes]'
        }
        assert (design[INTERCEPT] == 1).all()
        assert design['gender[T.male]'].tolist() == [0, 1, 1, 0]
        assert design['phys_active[T.Yes]'].tolist() == [1, 0, 0, 1]

    def test_reference_level_does_not_depend_on_data(self):
        # Only males present: the male dummy is still coded against female
        records = _records().assign(gender='male')
        design = build_design_matrix(records, AnalysisConfig.NUMERIC_PREDICTORS,
                                     AnalysisConfig.CATEGORICAL_LEVELS)
        assert 'gender[T.male]' in design.columns
        assert (design['gender[T.male]'] == 1).all()

    def test_unknown_level(self):
        records = _records()
        records.loc[0, 'gender'] = 'other'
        with pytest.raises(ValueError, match="Unknown levels"):
            build_design_matrix(records, AnalysisConfig.NUMERIC_PREDICTORS,
                                AnalysisConfig.CATEGORICAL_LEVELS)

    def test_missing_predictor_column(self):
        with pytest.raises(MissingDataError):
            build_design_matrix(_records().drop(columns='bmi'),
                                AnalysisConfig.NUMERIC_PREDICTORS,
                                AnalysisConfig.CATEGORICAL_LEVELS)


class TestLogisticFit:
    """Fit on the synthetic training partition."""

    def test_risk_factor_directions(self, fitted_model):
        odds_ratios = fitted_model.odds_ratios
        assert odds_ratios['age'] > 1
        assert odds_ratios['bmi'] > 1
        assert fitted_model.pvalues['age'] < 0.05

    def test_matches_statsmodels_glm(self, fitted_model, split_data):
        train_df, _ = split_data
        design = fitted_model.design_matrix(train_df)
        reference = sm.GLM(train_df['diabetes'].astype(float), design,
                           family=sm.families.Binomial()).fit()

        np.testing.assert_allclose(fitted_model.params.values, reference.params.values, rtol=1e-6)
        np.testing.assert_allclose(fitted_model.bse.values, reference.bse.values, rtol=1e-6)
        np.testing.assert_allclose(fitted_model.pvalues.values, reference.pvalues.values,
                                   rtol=1e-6)

    def test_fit_summary(self, fitted_model, split_data):
        train_df, _ = split_data
        assert fitted_model.n_obs == len(train_df)
        assert fitted_model.n_events == int(train_df['diabetes'].sum())
        assert fitted_model.terms[0] == INTERCEPT

    def test_confidence_intervals_bracket_estimates(self, fitted_model):
        table = fitted_model.coefficients_table()
        assert list(table.columns) == [
            'term', 'estimate', 'std_error', 'statistic', 'p_value', 'conf_low', 'conf_high'
        ]
        assert (table['conf_low'] < table['estimate']).all()
        assert (table['estimate'] < table['conf_high']).all()
        assert (table['conf_low'] > 0).all()

    def test_log_odds_scale(self, fitted_model):
        table = fitted_model.coefficients_table(exponentiate=False).set_index('term')
        np.testing.assert_allclose(table['estimate'], fitted_model.params)
        ci = fitted_model.conf_int(0.95)
        np.testing.assert_allclose(table['conf_low'], ci['lower'])
        np.testing.assert_allclose(
            ci['upper'] - fitted_model.params, 1.959964 * fitted_model.bse, rtol=1e-5
        )

    def test_wider_interval_at_higher_level(self, fitted_model):
        narrow = fitted_model.conf_int(0.90)
        wide = fitted_model.conf_int(0.99)
        assert ((wide['upper'] - wide['lower']) > (narrow['upper'] - narrow['lower'])).all()

    def test_predictions_are_probabilities(self, fitted_model, split_data):
        _, test_df = split_data
        scored = score_records(fitted_model, test_df)
        assert len(scored) == len(test_df)
        assert scored['pred_prob'].between(0, 1).all()
        assert 'pred_prob' not in test_df.columns

    def test_predict_rejects_unknown_level(self, fitted_model):
        records = _records()
        records.loc[1, 'phys_active'] = 'Sometimes'
        with pytest.raises(ValueError):
            fitted_model.predict_proba(records)

    def test_predict_rejects_missing_predictor(self, fitted_model):
        records = _records()
        records.loc[1, 'age'] = np.nan
        with pytest.raises(MissingDataError, match="age"):
            fitted_model.predict_proba(records)

    def test_key_findings(self, fitted_model):
        lines = key_findings(fitted_model)
        assert len(lines) == 5
        assert any(line.startswith("- age:") and "increased odds per unit" in line
                   for line in lines)
        assert any("gender = male (vs female)" in line for line in lines)


class TestFitFailures:
    """Conditions under which no model is produced."""

    def test_iteration_cap(self, split_data):
        train_df, _ = split_data
        modeler = LogisticRiskModeler(regressor=StatsmodelsGLMRegressor(max_iter=1),
                                      verbose=False)
        with pytest.raises(FitConvergenceError):
            modeler.fit(train_df)

    def test_single_class_outcome(self, split_data):
        train_df, _ = split_data
        with pytest.raises(ValueError):
            LogisticRiskModeler(verbose=False).fit(train_df.assign(diabetes=0))

    def test_missing_outcome(self, split_data):
        train_df, _ = split_data
        train_df = train_df.copy()
        train_df['diabetes'] = train_df['diabetes'].astype(float)
        train_df.iloc[0, train_df.columns.get_loc('diabetes')] = np.nan
        with pytest.raises(MissingDataError):
            LogisticRiskModeler(verbose=False).fit(train_df)


class TestVIF:
    """Variance inflation factors."""

    def test_synthetic_predictors_not_flagged(self, split_data):
        train_df, _ = split_data
        vif = LogisticRiskModeler(verbose=False).check_multicollinearity(train_df)

        assert list(vif.columns) == ['Variable', 'VIF', 'Flagged', 'Interpretation']
        assert INTERCEPT not in vif['Variable'].tolist()
        assert len(vif) == 5
        assert (vif['VIF'] >= 1).all()
        assert not vif['Flagged'].any()

    def test_collinear_predictors_flagged(self):
        rng = np.random.default_rng(3)
        x1 = rng.normal(size=300)
        design = pd.DataFrame({
            'x1': x1,
            'x2': x1 + rng.normal(scale=0.05, size=300),
            'x3': rng.normal(size=300),
        })
        vif = calculate_vif(design, verbose=False).set_index('Variable')

        assert vif.loc['x1', 'Flagged']
        assert vif.loc['x2', 'Flagged']
        assert not vif.loc['x3', 'Flagged']
        assert vif.loc['x1', 'Interpretation'] == "Severe (>10)"

    def test_matches_auxiliary_regression(self):
        rng = np.random.default_rng(5)
        x1 = rng.normal(size=500)
        x2 = 0.6 * x1 + rng.normal(size=500)
        design = pd.DataFrame({INTERCEPT: 1.0, 'x1': x1, 'x2': x2})

        others = design[[INTERCEPT, 'x2']].values
        coef, *_ = np.linalg.lstsq(others, x1, rcond=None)
        residuals = x1 - others @ coef
        r_squared = 1 - residuals.var() / x1.var()

        vif = calculate_vif(design, verbose=False).set_index('Variable')
        assert vif.loc['x1', 'VIF'] == pytest.approx(1 / (1 - r_squared), rel=1e-6)


class TestModelPersistence:
    """The pickled model scores records like the in-memory one."""

    def test_pickle_round_trip(self, fitted_model, split_data, tmp_path):
        _, test_df = split_data
        reporter = ResultsReporter(tmp_path, verbose=False)
        path = reporter.save_model(fitted_model, optimal_threshold=0.1)

        components = load_model(path)
        assert components['optimal_threshold'] == 0.1
        assert components['feature_names'] == fitted_model.terms
        np.testing.assert_allclose(components['model'].predict_proba(test_df),
                                   fitted_model.predict_proba(test_df))
