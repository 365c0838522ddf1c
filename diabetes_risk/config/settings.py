"""
Configuration settings for diabetes risk analysis project.
"""

from pathlib import Path
from typing import Optional

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
OUTPUT_DIR = PROJECT_ROOT / "output"
FIGURES_DIR = OUTPUT_DIR / "figures"
RESULTS_DIR = OUTPUT_DIR / "results"

# Data file paths
DATA_FILE = DATA_DIR / "nhanes.csv"


def ensure_output_dirs(output_dir: Optional[Path] = None) -> Path:
    """
    Create output directories if they don't exist.

    Args:
        output_dir: Root output directory. If None, uses OUTPUT_DIR.

    Returns:
        The root output directory
    """
    root = Path(output_dir) if output_dir is not None else OUTPUT_DIR
    for dir_path in [root, root / "figures", root / "results"]:
        dir_path.mkdir(parents=True, exist_ok=True)
    return root


# Analysis parameters
class AnalysisConfig:
    """Configuration parameters for analysis."""

    # Outcome and predictors (after column renaming)
    OUTCOME = 'diabetes'
    NUMERIC_PREDICTORS = ('age', 'bmi', 'bp_sys_ave')

    # Categorical predictors with their levels; the first level is the reference
    CATEGORICAL_LEVELS = {
        'gender': ('female', 'male'),
        'phys_active': ('No', 'Yes'),
    }

    # Value of the raw outcome column that marks a positive case
    POSITIVE_LABEL = 'Yes'

    # Train/test split
    TRAIN_FRACTION = 0.7

    # Statistical significance level
    ALPHA = 0.05
    CONFIDENCE_LEVEL = 0.95

    # VIF at or above this value flags concerning collinearity
    VIF_THRESHOLD = 5.0

    # Midpoint threshold used as the naive baseline
    DEFAULT_THRESHOLD = 0.5

    # GLM iteration limit
    MAX_ITER = 100

    # Random seed for reproducibility
    RANDOM_SEED = 42


# Column names mapping (NHANES names to snake_case for easier coding)
COLUMN_MAPPING = {
    'Diabetes': 'diabetes',
    'Age': 'age',
    'Gender': 'gender',
    'BMI': 'bmi',
    'BPSysAve': 'bp_sys_ave',
    'PhysActive': 'phys_active',
}
