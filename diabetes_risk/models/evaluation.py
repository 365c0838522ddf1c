"""
Threshold evaluation for predicted diabetes probabilities.

This module implements the evaluation steps run on the held-out partition:
1. ROC curve over every distinct predicted probability (plus 0 and 1)
2. AUC by trapezoidal integration of the curve
3. Operating threshold selection by Youden's index (J = TPR - FPR)
4. Confusion matrix and derived rates at a chosen threshold

A record is classified positive iff its predicted probability is strictly
greater than the threshold. Tied probabilities move together along the curve.
"""

import numpy as np
import pandas as pd
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Tuple, Any, Optional
from sklearn.metrics import confusion_matrix

from ..config.settings import AnalysisConfig
from ..exceptions import UndefinedMetric

# Absolute tolerance when comparing J values and corner distances
TIE_TOLERANCE = 1e-12


def _validate_scores(y_true, y_score) -> Tuple[np.ndarray, np.ndarray]:
    """Check labels are binary and scores are probabilities of matching length."""
    y_true = np.asarray(y_true)
    y_score = np.asarray(y_score, dtype=float)

    if y_true.ndim != 1 or y_score.ndim != 1:
        raise ValueError("Labels and scores must be one-dimensional")
    if len(y_true) != len(y_score):
        raise ValueError(f"Length mismatch: {len(y_true)} labels vs {len(y_score)} scores")
    if len(y_true) == 0:
        raise ValueError("No records to evaluate")
    if np.isnan(y_score).any():
        raise ValueError("Scores contain missing values")
    if (y_score < 0).any() or (y_score > 1).any():
        raise ValueError("Scores must be probabilities in [0, 1]")

    labels = np.unique(y_true)
    if not np.isin(labels, [0, 1]).all():
        raise ValueError(f"Labels must be binary 0/1, got {labels.tolist()}")

    return y_true.astype(int), y_score


def trapezoid_auc(fpr: np.ndarray, tpr: np.ndarray) -> float:
    """
    Area under an ROC curve by trapezoidal integration.

    Points are sorted by increasing FPR (then TPR) before integrating.

    Args:
        fpr: False positive rates
        tpr: True positive rates

    Returns:
        Area in [0, 1]
    """
    fpr = np.asarray(fpr, dtype=float)
    tpr = np.asarray(tpr, dtype=float)
    order = np.lexsort((tpr, fpr))
    x, y = fpr[order], tpr[order]
    return float(np.sum(np.diff(x) * (y[1:] + y[:-1]) / 2.0))


@dataclass(frozen=True, eq=False)
class ROCCurve:
    """ROC points ordered by decreasing threshold."""
    fpr: np.ndarray
    tpr: np.ndarray
    thresholds: np.ndarray
    n_positive: int
    n_negative: int

    @property
    def youden(self) -> np.ndarray:
        return self.tpr - self.fpr

    @property
    def auc(self) -> float:
        return trapezoid_auc(self.fpr, self.tpr)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'threshold': self.thresholds,
            'fpr': self.fpr,
            'tpr': self.tpr,
            'youden_j': self.youden,
        })


class CurveBuilder(ABC):
    """Builds an ROC curve from (label, probability) pairs."""

    @abstractmethod
    def build(self, y_true, y_score) -> ROCCurve:
        """Return the ROC curve for the given labels and scores."""


class ThresholdSweepCurveBuilder(CurveBuilder):
    """
    Sweep every distinct score as a threshold.

    Candidate thresholds are the distinct scores plus the boundaries 0 and 1.
    Counts above each threshold come from binary search over the sorted
    scores of each class, so ties are grouped automatically.
    """

    def build(self, y_true, y_score) -> ROCCurve:
        y_true, y_score = _validate_scores(y_true, y_score)

        n_positive = int(y_true.sum())
        n_negative = int(len(y_true) - n_positive)
        if n_positive == 0:
            raise UndefinedMetric('true_positive_rate',
                                  "ROC curve is undefined: no positive cases")
        if n_negative == 0:
            raise UndefinedMetric('false_positive_rate',
                                  "ROC curve is undefined: no negative cases")

        thresholds = np.unique(np.concatenate([y_score, [0.0, 1.0]]))[::-1]

        pos_scores = np.sort(y_score[y_true == 1])
        neg_scores = np.sort(y_score[y_true == 0])

        # Records strictly above each threshold
        tp = n_positive - np.searchsorted(pos_scores, thresholds, side='right')
        fp = n_negative - np.searchsorted(neg_scores, thresholds, side='right')

        return ROCCurve(
            fpr=fp / n_negative,
            tpr=tp / n_positive,
            thresholds=thresholds,
            n_positive=n_positive,
            n_negative=n_negative,
        )


def compute_roc_curve(y_true, y_score,
                      curve_builder: Optional[CurveBuilder] = None) -> ROCCurve:
    """Build the ROC curve, defaulting to a full threshold sweep."""
    builder = curve_builder or ThresholdSweepCurveBuilder()
    return builder.build(y_true, y_score)


def select_youden_threshold(roc: ROCCurve) -> float:
    """
    Select the threshold maximizing Youden's J = TPR - FPR.

    Only thresholds strictly inside (0, 1) are candidates. Ties at the
    maximum J go to the point closest to the top-left corner, measured as
    (1 - TPR) + FPR, and then to the larger threshold.

    Args:
        roc: ROC curve to search

    Returns:
        Threshold in (0, 1)
    """
    candidates = np.flatnonzero((roc.thresholds > 0) & (roc.thresholds < 1))
    if len(candidates) == 0:
        raise UndefinedMetric('youden_threshold',
                              "No candidate threshold strictly between 0 and 1")

    j = roc.youden[candidates]
    best = candidates[np.isclose(j, j.max(), rtol=0, atol=TIE_TOLERANCE)]

    corner_distance = (1 - roc.tpr[best]) + roc.fpr[best]
    best = best[np.isclose(corner_distance, corner_distance.min(),
                           rtol=0, atol=TIE_TOLERANCE)]

    return float(roc.thresholds[best].max())


@dataclass(frozen=True)
class ConfusionMatrix:
    """2x2 counts of predicted vs actual label at one threshold."""
    tp: int
    fp: int
    tn: int
    fn: int
    threshold: float

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn

    @staticmethod
    def _rate(metric: str, numerator: int, denominator: int) -> float:
        if denominator == 0:
            raise UndefinedMetric(metric)
        return numerator / denominator

    @property
    def sensitivity(self) -> float:
        return self._rate('sensitivity', self.tp, self.tp + self.fn)

    @property
    def specificity(self) -> float:
        return self._rate('specificity', self.tn, self.tn + self.fp)

    @property
    def accuracy(self) -> float:
        return self._rate('accuracy', self.tp + self.tn, self.total)

    @property
    def precision(self) -> float:
        return self._rate('precision', self.tp, self.tp + self.fp)

    @property
    def negative_predictive_value(self) -> float:
        return self._rate('negative_predictive_value', self.tn, self.tn + self.fn)

    def metrics(self) -> Dict[str, Any]:
        """
        Counts plus every defined rate.

        Undefined rates are left out of the result and listed under
        'undefined_metrics' instead.
        """
        result = {
            'threshold': self.threshold,
            'tp': self.tp, 'fp': self.fp, 'tn': self.tn, 'fn': self.fn,
            'total': self.total,
        }
        undefined = []
        for name in ['sensitivity', 'specificity', 'accuracy',
                     'precision', 'negative_predictive_value']:
            try:
                result[name] = getattr(self, name)
            except UndefinedMetric:
                undefined.append(name)
        result['undefined_metrics'] = undefined
        return result

    def to_frame(self) -> pd.DataFrame:
        """Table laid out as Predicted (rows) x Actual (columns)."""
        return pd.DataFrame(
            [[self.tn, self.fn], [self.fp, self.tp]],
            index=pd.Index(['No', 'Yes'], name='Predicted'),
            columns=pd.Index(['No', 'Yes'], name='Actual'),
        )


def confusion_matrix_at(y_true, y_score, threshold: float) -> ConfusionMatrix:
    """
    Classify each record positive iff its score exceeds the threshold.

    Args:
        y_true: Actual binary labels
        y_score: Predicted probabilities
        threshold: Classification threshold

    Returns:
        ConfusionMatrix at the threshold
    """
    y_true, y_score = _validate_scores(y_true, y_score)
    y_pred = (y_score > threshold).astype(int)
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    return ConfusionMatrix(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn),
                           threshold=float(threshold))


@dataclass(frozen=True, eq=False)
class EvaluationResult:
    """Evaluation of one set of scores on the held-out partition."""
    roc: ROCCurve
    auc: float
    optimal_threshold: float
    optimal: ConfusionMatrix
    baseline: ConfusionMatrix

    def threshold_comparison(self) -> pd.DataFrame:
        rows = []
        for label, cm in [('youden', self.optimal), ('default', self.baseline)]:
            row = cm.metrics()
            row['undefined_metrics'] = ', '.join(row['undefined_metrics'])
            rows.append({'rule': label, **row})
        return pd.DataFrame(rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'auc': self.auc,
            'optimal_threshold': self.optimal_threshold,
            'n_positive': self.roc.n_positive,
            'n_negative': self.roc.n_negative,
            'optimal': self.optimal.metrics(),
            'baseline': self.baseline.metrics(),
        }


class ThresholdEvaluator:
    """
    Evaluate predicted probabilities against actual labels.

    Builds the ROC curve, integrates AUC, picks the Youden threshold and
    compares its confusion matrix with the default midpoint threshold.
    """

    def __init__(self, curve_builder: Optional[CurveBuilder] = None,
                 default_threshold: float = AnalysisConfig.DEFAULT_THRESHOLD,
                 verbose: bool = True):
        """
        Initialize the evaluator.

        Args:
            curve_builder: ROC curve implementation. Defaults to a full sweep.
            default_threshold: Baseline threshold to compare against
            verbose: Whether to print progress information
        """
        self.curve_builder = curve_builder or ThresholdSweepCurveBuilder()
        self.default_threshold = default_threshold
        self.verbose = verbose

    def evaluate(self, y_true, y_score) -> EvaluationResult:
        roc = self.curve_builder.build(y_true, y_score)
        auc = roc.auc
        threshold = select_youden_threshold(roc)

        result = EvaluationResult(
            roc=roc,
            auc=auc,
            optimal_threshold=threshold,
            optimal=confusion_matrix_at(y_true, y_score, threshold),
            baseline=confusion_matrix_at(y_true, y_score, self.default_threshold),
        )

        if self.verbose:
            print(f"AUC: {auc:.3f}")
            print(f"Optimal threshold: {threshold:.3f}")

        return result
