"""
Console summaries and result files for diabetes risk analysis.
"""

import re
import json
import pickle
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Any

from ..config.settings import AnalysisConfig
from ..models.regression import FittedModel
from ..models.evaluation import EvaluationResult, ConfusionMatrix
from ..exceptions import UndefinedMetric

DUMMY_TERM = re.compile(r'^(?P<variable>\w+)\[T\.(?P<level>.+)\]$')


def convert_numpy(obj):
    """Convert numpy types for JSON serialization"""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, (np.integer, np.floating, np.bool_)):
        return obj.item()
    elif isinstance(obj, pd.DataFrame):
        return [convert_numpy(row) for row in obj.to_dict(orient='records')]
    elif isinstance(obj, pd.Series):
        return {str(k): convert_numpy(v) for k, v in obj.items()}
    elif isinstance(obj, dict):
        return {str(k): convert_numpy(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy(item) for item in obj]
    return obj


def format_p_value(p: float) -> str:
    return "p < 0.001" if p < 0.001 else f"p = {p:.3f}"


def describe_term(term: str, model: FittedModel) -> str:
    """Readable label for a design term, e.g. 'gender = male (vs female)'."""
    match = DUMMY_TERM.match(term)
    if match:
        variable, level = match.group('variable'), match.group('level')
        reference = model.categorical_levels[variable][0]
        return f"{variable} = {level} (vs {reference})"
    return term


def key_findings(model: FittedModel, alpha: float = AnalysisConfig.ALPHA) -> List[str]:
    """
    Percent change in odds per term, derived from the fitted model.

    Args:
        model: Fitted logistic regression
        alpha: Significance level

    Returns:
        One line per non-intercept term
    """
    lines = []
    odds_ratios = model.odds_ratios
    pvalues = model.pvalues

    for term in model.terms:
        if term == 'Intercept':
            continue
        change = (odds_ratios[term] - 1) * 100
        direction = 'increased' if change >= 0 else 'decreased'
        unit = '' if DUMMY_TERM.match(term) else ' per unit'
        p = pvalues[term]
        line = f"- {describe_term(term, model)}: {abs(change):.1f}% {direction} odds{unit} ({format_p_value(p)})"
        if p >= alpha:
            line += " - not significant"
        lines.append(line)

    return lines


class ResultsReporter:
    """
    Print analysis summaries and write result files.

    Writes the coefficients table, metrics table, JSON results and the
    pickled model into the results directory.
    """

    def __init__(self, results_dir: Path, verbose: bool = True):
        """
        Initialize the reporter.

        Args:
            results_dir: Directory for result files
            verbose: Whether to print summaries
        """
        self.results_dir = Path(results_dir)
        self.verbose = verbose

    def _print(self, text: str = ""):
        if self.verbose:
            print(text)

    def print_coefficients(self, model: FittedModel):
        self._print("Odds ratios with 95% confidence intervals:")
        self._print(model.coefficients_table().to_string(index=False, float_format='%.4f'))
        self._print()
        self._print("Key findings:")
        for line in key_findings(model):
            self._print(line)

    def print_confusion(self, cm: ConfusionMatrix, heading: str):
        self._print(f"\n{heading} (threshold = {cm.threshold:.3f}):")
        self._print(cm.to_frame().to_string())
        for name in ['sensitivity', 'specificity', 'accuracy']:
            try:
                self._print(f"{name.capitalize()}: {getattr(cm, name):.3f}")
            except UndefinedMetric as e:
                self._print(f"{name.capitalize()}: undefined ({e})")

    def print_evaluation(self, result: EvaluationResult):
        self._print("\nModel Performance:")
        self._print(f"AUC: {result.auc:.3f}")
        self._print(f"Optimal threshold (Youden): {result.optimal_threshold:.3f}")
        self.print_confusion(result.optimal, "Performance at optimal threshold")
        self.print_confusion(result.baseline, "Performance at default threshold")

        sensitivities = []
        for cm in [result.baseline, result.optimal]:
            try:
                sensitivities.append(f"{cm.sensitivity:.3f}")
            except UndefinedMetric:
                sensitivities.append("undefined")
        self._print(f"\nAt {result.baseline.threshold} threshold, sensitivity is only "
                    f"{sensitivities[0]} vs {sensitivities[1]} at the Youden threshold")

    def write_coefficients(self, model: FittedModel,
                           filename: str = "model_coefficients.csv") -> Path:
        path = self.results_dir / filename
        model.coefficients_table().to_csv(path, index=False)
        self._print(f"✅ Coefficients saved: {path}")
        return path

    def write_vif(self, vif_table: pd.DataFrame, filename: str = "vif.csv") -> Path:
        path = self.results_dir / filename
        vif_table.to_csv(path, index=False)
        self._print(f"✅ VIF table saved: {path}")
        return path

    def write_metrics(self, result: EvaluationResult,
                      filename: str = "threshold_metrics.csv") -> Path:
        path = self.results_dir / filename
        metrics_df = result.threshold_comparison()
        metrics_df.insert(1, 'auc', result.auc)
        metrics_df.to_csv(path, index=False)
        self._print(f"✅ Metrics saved: {path}")
        return path

    def write_results_json(self, results: Dict[str, Any],
                           filename: str = "analysis_results.json") -> Path:
        path = self.results_dir / filename
        with open(path, 'w') as f:
            json.dump(convert_numpy(results), f, indent=2)
        self._print(f"✅ Results saved: {path}")
        return path

    def save_model(self, model: FittedModel, optimal_threshold: float,
                   filename: str = "diabetes_model.pkl") -> Path:
        path = self.results_dir / filename
        model_components = {
            'model': model,
            'optimal_threshold': optimal_threshold,
            'feature_names': model.terms,
        }
        with open(path, 'wb') as f:
            pickle.dump(model_components, f)
        self._print(f"✅ Model saved: {path}")
        return path


def load_model(path: Path) -> Dict[str, Any]:
    """Load model components written by ResultsReporter.save_model."""
    with open(path, 'rb') as f:
        return pickle.load(f)
