"""
Synthetic NHANES-like survey data for demonstration runs and tests.
"""

import numpy as np
import pandas as pd
from scipy.special import expit

from ..config.settings import AnalysisConfig


class SyntheticNHANESGenerator:
    """
    Generate survey extracts with the NHANES column layout.

    Diabetes status is drawn from a logistic model of age, gender, BMI and
    systolic blood pressure, so fitted odds ratios have a known direction.
    """

    # Log-odds per unit of each risk factor
    TRUE_COEFFICIENTS = {
        'intercept': -9.0,
        'age': 0.055,
        'male': 0.3,
        'bmi': 0.09,
        'bp_sys_ave': 0.004,
        'phys_active': -0.15,
    }

    @staticmethod
    def generate(n_samples: int = 3000,
                 missing_rate: float = 0.05,
                 random_state: int = AnalysisConfig.RANDOM_SEED) -> pd.DataFrame:
        """
        Generate a synthetic survey extract.

        Args:
            n_samples: Number of respondents
            missing_rate: Fraction of predictor cells set to missing
            random_state: Random seed

        Returns:
            DataFrame with Diabetes, Age, Gender, BMI, BPSysAve, PhysActive
        """
        rng = np.random.default_rng(random_state)
        coef = SyntheticNHANESGenerator.TRUE_COEFFICIENTS

        age = rng.integers(18, 81, size=n_samples).astype(float)
        male = rng.random(n_samples) < 0.49
        bmi = np.clip(rng.normal(28.5, 6.5, size=n_samples) + 0.03 * (age - 45), 15, 65)
        bp = np.clip(rng.normal(105, 12, size=n_samples) + 0.4 * age + 3 * male, 80, 220)
        active = rng.random(n_samples) < np.clip(0.7 - 0.005 * (age - 18), 0.2, 0.9)

        log_odds = (coef['intercept'] + coef['age'] * age + coef['male'] * male
                    + coef['bmi'] * bmi + coef['bp_sys_ave'] * bp
                    + coef['phys_active'] * active)
        diabetes = rng.random(n_samples) < expit(log_odds)

        df = pd.DataFrame({
            'Diabetes': np.where(diabetes, 'Yes', 'No'),
            'Age': age,
            'Gender': np.where(male, 'male', 'female'),
            'BMI': np.round(bmi, 2),
            'BPSysAve': np.round(bp),
            'PhysActive': np.where(active, 'Yes', 'No'),
        })

        # Introduce missing values in predictors and outcome
        if missing_rate > 0:
            mask = rng.random(df.shape) < missing_rate
            df = df.mask(mask)

        return df
