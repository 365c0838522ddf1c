"""
Diabetes Risk Analysis
======================

An analysis toolkit for diabetes risk factors in NHANES survey data.

Structure:
- config/: Paths, analysis parameters and column mapping
- data/: Data loading, preparation, stratified splitting and synthetic data
- analysis/: Descriptive statistics by diabetes status
- models/: Logistic regression fit and threshold evaluation (ROC, Youden)
- utils/: Visualization and result reporting

Research question: which factors (age, gender, BMI, systolic blood pressure,
physical activity) are associated with diabetes prevalence?
"""

__version__ = "1.0.0"
__author__ = "Diabetes Risk Team"
