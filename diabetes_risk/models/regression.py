"""
Logistic regression of diabetes status on risk factors.

The model estimates the log-odds of diabetes as a linear combination of age,
BMI, systolic blood pressure and dummy-coded gender and physical activity
(treatment coding against a fixed reference level). Coefficients come with
standard errors, Wald p-values and confidence intervals; exponentiated
coefficients are odds ratios.

The fitting library sits behind the Regressor interface. The default
implementation is a statsmodels binomial GLM.
"""

import warnings
import numpy as np
import pandas as pd
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Tuple, Optional
from patsy import dmatrix
from scipy import stats
from scipy.special import expit
import statsmodels.api as sm
from statsmodels.stats.outliers_influence import variance_inflation_factor
from statsmodels.tools.sm_exceptions import (
    ConvergenceWarning, PerfectSeparationError, PerfectSeparationWarning
)

from ..config.settings import AnalysisConfig
from ..exceptions import FitConvergenceError, MissingDataError

INTERCEPT = 'Intercept'


def build_design_matrix(data: pd.DataFrame,
                        numeric_predictors: Tuple[str, ...],
                        categorical_levels: Dict[str, Tuple[str, ...]]) -> pd.DataFrame:
    """
    Build the model design matrix with an intercept and treatment-coded dummies.

    Args:
        data: Records with the predictor columns
        numeric_predictors: Columns used as-is
        categorical_levels: Categorical columns and their levels, reference first

    Returns:
        Design matrix with columns such as 'Intercept', 'age', 'gender[T.male]'
    """
    columns = list(numeric_predictors) + list(categorical_levels)
    missing_cols = [c for c in columns if c not in data.columns]
    if missing_cols:
        raise MissingDataError(f"Predictor columns not found: {missing_cols}")

    frame = data[columns].copy()

    incomplete = [c for c in columns if frame[c].isna().any()]
    if incomplete:
        raise MissingDataError(f"Missing values in predictor columns: {incomplete}")

    for col, levels in categorical_levels.items():
        values = frame[col].astype(object)
        unknown = set(values.dropna().unique()) - set(levels)
        if unknown:
            raise ValueError(f"Unknown levels for '{col}': {sorted(map(str, unknown))}")
        frame[col] = pd.Categorical(values, categories=list(levels))

    formula = ' + '.join(columns)
    return dmatrix(formula, frame, NA_action='raise', return_type='dataframe')


@dataclass(frozen=True, eq=False)
class RegressionFit:
    """Raw output of a Regressor."""
    params: pd.Series
    bse: pd.Series
    converged: bool
    n_iter: int
    log_likelihood: float
    aic: float


class Regressor(ABC):
    """Fits a binomial-link regression on a design matrix."""

    @abstractmethod
    def fit(self, design: pd.DataFrame, outcome: pd.Series) -> RegressionFit:
        """Fit log-odds of outcome on the design columns."""


class StatsmodelsGLMRegressor(Regressor):
    """Binomial GLM with logit link fitted by IRLS in statsmodels."""

    def __init__(self, max_iter: int = AnalysisConfig.MAX_ITER):
        self.max_iter = max_iter

    def fit(self, design: pd.DataFrame, outcome: pd.Series) -> RegressionFit:
        model = sm.GLM(outcome.astype(float), design, family=sm.families.Binomial())

        with warnings.catch_warnings():
            warnings.simplefilter('error', ConvergenceWarning)
            warnings.simplefilter('error', PerfectSeparationWarning)
            try:
                result = model.fit(maxiter=self.max_iter)
            except (ConvergenceWarning, PerfectSeparationWarning,
                    PerfectSeparationError, np.linalg.LinAlgError) as e:
                raise FitConvergenceError(f"Logistic regression failed to converge: {e}") from e

        if not result.converged:
            raise FitConvergenceError(
                f"Logistic regression did not converge in {self.max_iter} iterations"
            )
        if not np.all(np.isfinite(result.params)) or not np.all(np.isfinite(result.bse)):
            raise FitConvergenceError("Logistic regression produced non-finite estimates")

        return RegressionFit(
            params=pd.Series(result.params, index=design.columns),
            bse=pd.Series(result.bse, index=design.columns),
            converged=True,
            n_iter=int(result.fit_history.get('iteration', 0)),
            log_likelihood=float(result.llf),
            aic=float(result.aic),
        )


@dataclass(frozen=True, eq=False)
class FittedModel:
    """
    Fitted logistic regression, read-only after fit.

    Carries the predictor columns and levels so new records can be scored with the
    same design, and stays picklable for later reuse.
    """
    outcome: str
    numeric_predictors: Tuple[str, ...]
    categorical_levels: Dict[str, Tuple[str, ...]]
    params: pd.Series
    bse: pd.Series
    n_obs: int
    n_events: int
    log_likelihood: float
    aic: float

    @property
    def terms(self) -> List[str]:
        return list(self.params.index)

    @property
    def z_values(self) -> pd.Series:
        return self.params / self.bse

    @property
    def pvalues(self) -> pd.Series:
        """Two-sided p-values under the asymptotic normal approximation."""
        return pd.Series(2 * stats.norm.sf(np.abs(self.z_values)), index=self.params.index)

    @property
    def odds_ratios(self) -> pd.Series:
        return np.exp(self.params)

    def conf_int(self, level: float = AnalysisConfig.CONFIDENCE_LEVEL) -> pd.DataFrame:
        """Wald confidence interval for each coefficient on the log-odds scale."""
        z = stats.norm.ppf(1 - (1 - level) / 2)
        return pd.DataFrame({
            'lower': self.params - z * self.bse,
            'upper': self.params + z * self.bse,
        })

    def coefficients_table(self, level: float = AnalysisConfig.CONFIDENCE_LEVEL,
                           exponentiate: bool = True) -> pd.DataFrame:
        """
        Per-term coefficient table.

        Args:
            level: Confidence level for the interval bounds
            exponentiate: Report estimate and bounds as odds ratios

        Returns:
            DataFrame with term, estimate, std_error, statistic, p_value,
            conf_low and conf_high
        """
        ci = self.conf_int(level)
        estimate, low, high = self.params, ci['lower'], ci['upper']
        if exponentiate:
            estimate, low, high = np.exp(estimate), np.exp(low), np.exp(high)

        return pd.DataFrame({
            'term': self.params.index,
            'estimate': estimate.values,
            'std_error': self.bse.values,
            'statistic': self.z_values.values,
            'p_value': self.pvalues.values,
            'conf_low': low.values,
            'conf_high': high.values,
        })

    def design_matrix(self, data: pd.DataFrame) -> pd.DataFrame:
        design = build_design_matrix(data, self.numeric_predictors, self.categorical_levels)
        return design[self.terms]

    def predict_proba(self, data: pd.DataFrame) -> np.ndarray:
        """Predicted probability of diabetes for each record."""
        design = self.design_matrix(data)
        return expit(design.values @ self.params.values)


def calculate_vif(design: pd.DataFrame, threshold: float = AnalysisConfig.VIF_THRESHOLD,
                  verbose: bool = True) -> pd.DataFrame:
    """
    Calculate Variance Inflation Factor for multicollinearity assessment.

    Each term is regressed on all other design columns, intercept included.

    Args:
        design: Design matrix with an 'Intercept' column
        threshold: VIF at or above this value is flagged (default: 5.0)
        verbose: Whether to print the table

    Returns:
        DataFrame with Variable, VIF, Flagged and Interpretation columns
    """
    if INTERCEPT not in design.columns:
        design = sm.add_constant(design, prepend=True).rename(columns={'const': INTERCEPT})

    values = design.values.astype(float)
    variables = [c for c in design.columns if c != INTERCEPT]

    with np.errstate(divide='ignore'):
        vif_values = [
            variance_inflation_factor(values, design.columns.get_loc(var))
            for var in variables
        ]

    vif_data = pd.DataFrame({'Variable': variables, 'VIF': vif_values})
    vif_data['Flagged'] = vif_data['VIF'] >= threshold
    vif_data['Interpretation'] = vif_data['VIF'].apply(
        lambda x: "Severe (>10)" if x > 10 else ("High (>=5)" if x >= threshold else "Low (<5)")
    )

    if verbose:
        print("Variance Inflation Factors (VIF):")
        print(vif_data.to_string(index=False))
        flagged = vif_data.loc[vif_data['Flagged'], 'Variable'].tolist()
        if flagged:
            print(f"   ⚠️  High VIF variables (>={threshold}): {flagged}")
        else:
            print(f"   ✅ All VIF values < {threshold} (no multicollinearity issues)")

    return vif_data


class LogisticRiskModeler:
    """
    Fit the diabetes risk model on the training partition.

    Builds the design matrix, delegates estimation to a Regressor and wraps
    the result in an immutable FittedModel.
    """

    def __init__(self, regressor: Optional[Regressor] = None,
                 outcome: str = AnalysisConfig.OUTCOME,
                 numeric_predictors: Tuple[str, ...] = AnalysisConfig.NUMERIC_PREDICTORS,
                 categorical_levels: Optional[Dict[str, Tuple[str, ...]]] = None,
                 verbose: bool = True):
        """
        Initialize the modeler.

        Args:
            regressor: Fitting backend. Defaults to a statsmodels binomial GLM.
            outcome: Binary outcome column
            numeric_predictors: Predictors used as-is
            categorical_levels: Categorical predictors and levels, reference first
            verbose: Whether to print progress information
        """
        self.regressor = regressor or StatsmodelsGLMRegressor()
        self.outcome = outcome
        self.numeric_predictors = tuple(numeric_predictors)
        self.categorical_levels = dict(categorical_levels or AnalysisConfig.CATEGORICAL_LEVELS)
        self.verbose = verbose

    def design_matrix(self, data: pd.DataFrame) -> pd.DataFrame:
        return build_design_matrix(data, self.numeric_predictors, self.categorical_levels)

    def fit(self, train_df: pd.DataFrame) -> FittedModel:
        """
        Fit the logistic regression.

        Args:
            train_df: Training partition with outcome and predictors

        Returns:
            FittedModel with coefficients and standard errors
        """
        y = train_df[self.outcome]
        if y.isna().any():
            raise MissingDataError(f"Outcome '{self.outcome}' has missing values")
        if set(y.unique()) != {0, 1}:
            raise ValueError(f"Outcome must contain both classes 0 and 1, got {sorted(y.unique())}")

        design = self.design_matrix(train_df)
        fit = self.regressor.fit(design, y)

        model = FittedModel(
            outcome=self.outcome,
            numeric_predictors=self.numeric_predictors,
            categorical_levels=self.categorical_levels,
            params=fit.params,
            bse=fit.bse,
            n_obs=int(len(y)),
            n_events=int(y.sum()),
            log_likelihood=fit.log_likelihood,
            aic=fit.aic,
        )

        if self.verbose:
            print(f"   ✅ Model converged in {fit.n_iter} iterations "
                  f"(n = {model.n_obs}, events = {model.n_events}, AIC = {model.aic:.1f})")

        return model

    def check_multicollinearity(self, data: pd.DataFrame,
                                threshold: float = AnalysisConfig.VIF_THRESHOLD) -> pd.DataFrame:
        return calculate_vif(self.design_matrix(data), threshold=threshold, verbose=self.verbose)


def score_records(model: FittedModel, data: pd.DataFrame,
                  column: str = 'pred_prob') -> pd.DataFrame:
    """Return a copy of the records with the predicted probability added."""
    scored = data.copy()
    scored[column] = model.predict_proba(data)
    return scored
