"""
Configuration module for diabetes risk analysis.
"""

from .settings import (
    PROJECT_ROOT, DATA_DIR, DATA_FILE, OUTPUT_DIR, FIGURES_DIR, RESULTS_DIR,
    AnalysisConfig, COLUMN_MAPPING, ensure_output_dirs
)

__all__ = [
    'PROJECT_ROOT', 'DATA_DIR', 'DATA_FILE', 'OUTPUT_DIR', 'FIGURES_DIR',
    'RESULTS_DIR', 'AnalysisConfig', 'COLUMN_MAPPING', 'ensure_output_dirs'
]
