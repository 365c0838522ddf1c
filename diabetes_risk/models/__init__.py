"""
Models module for diabetes risk analysis.
Contains the logistic regression model and threshold evaluation.
"""

from .regression import *
from .evaluation import *

__all__ = [
    # Regression
    'Regressor',
    'StatsmodelsGLMRegressor',
    'RegressionFit',
    'FittedModel',
    'LogisticRiskModeler',
    'build_design_matrix',
    'calculate_vif',
    'score_records',

    # Evaluation
    'CurveBuilder',
    'ThresholdSweepCurveBuilder',
    'ROCCurve',
    'ConfusionMatrix',
    'EvaluationResult',
    'ThresholdEvaluator',
    'compute_roc_curve',
    'trapezoid_auc',
    'select_youden_threshold',
    'confusion_matrix_at',
]
