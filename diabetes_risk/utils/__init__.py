"""
Utilities module for diabetes risk analysis.

This module provides visualization and result reporting for the diabetes
risk analysis project.
"""

from .visualization import DiabetesVisualizer
from .reporting import ResultsReporter, key_findings, load_model

__all__ = ['DiabetesVisualizer', 'ResultsReporter', 'key_findings', 'load_model']
