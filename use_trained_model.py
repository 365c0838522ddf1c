#!/usr/bin/env python3
"""
Example script showing how to use the trained diabetes risk model for predictions.

This script loads the pickled model written by run_pipeline.py and scores new
respondents with the same design (reference levels included) and the Youden
threshold selected on the test partition.
"""

import argparse
import json
import sys
import numpy as np
import pandas as pd
from pathlib import Path

from diabetes_risk.config.settings import RESULTS_DIR
from diabetes_risk.utils.reporting import load_model

# Configuration
MODEL_PATH = RESULTS_DIR / "diabetes_model.pkl"
RESULTS_PATH = RESULTS_DIR / "analysis_results.json"


def load_trained_model(model_path: Path = MODEL_PATH):
    """Load the trained model and threshold"""
    print("📁 Loading trained model...")

    try:
        model_components = load_model(model_path)
    except FileNotFoundError:
        print(f"❌ Model file not found: {model_path}")
        print("🔧 Please run 'python run_pipeline.py' first")
        return None

    print("✅ Model loaded successfully!")
    print(f"   Terms: {model_components['feature_names']}")
    print(f"   Optimal threshold: {model_components['optimal_threshold']:.4f}")
    return model_components


def load_results_metadata(results_path: Path = RESULTS_PATH):
    """Load results metadata for context"""
    try:
        with open(results_path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        print(f"⚠️ Results file not found: {results_path}")
        return None


def create_example_data() -> pd.DataFrame:
    """A few respondents spanning low to high risk profiles"""
    return pd.DataFrame({
        'age': [25.0, 45.0, 62.0, 70.0, 55.0],
        'gender': ['female', 'male', 'male', 'female', 'male'],
        'bmi': [22.0, 27.5, 33.0, 29.0, 41.0],
        'bp_sys_ave': [110.0, 124.0, 138.0, 145.0, 132.0],
        'phys_active': ['Yes', 'Yes', 'No', 'No', 'No'],
    })


def make_predictions(model_components, data: pd.DataFrame) -> pd.DataFrame:
    """Score records and classify them at the stored threshold"""
    print(f"🎯 Making predictions on {len(data)} samples...")

    model = model_components['model']
    threshold = model_components['optimal_threshold']

    probabilities = model.predict_proba(data)
    predictions = (probabilities > threshold).astype(int)

    return pd.DataFrame({
        'sample_id': range(len(data)),
        'probability': probabilities,
        'prediction': predictions,
        'risk_level': np.where(predictions == 1, 'High Risk', 'Low Risk'),
    })


def display_predictions(data: pd.DataFrame, results_df: pd.DataFrame, threshold: float):
    """Display prediction results in a user-friendly format"""
    print("\n🏥 PREDICTION RESULTS")
    print("=" * 60)
    print(f"📊 Threshold: {threshold:.4f}")
    print(f"📊 Total samples: {len(data)}")
    print(f"📊 High-risk predictions: {int(results_df['prediction'].sum())}")
    print("-" * 60)

    for idx, row in results_df.iterrows():
        record = data.iloc[idx]
        print(f"Sample {row['sample_id'] + 1:2d}: {row['risk_level']:9s} "
              f"(prob: {row['probability']:.3f}) "
              f"age={record['age']:.0f}, {record['gender']}, bmi={record['bmi']:.1f}")


def main():
    """Main function demonstrating model usage"""
    parser = argparse.ArgumentParser(description='Score respondents with the trained diabetes model')
    parser.add_argument('--model', type=Path, default=MODEL_PATH, help='Pickled model file')
    parser.add_argument('--data', type=Path, help='CSV of respondents (snake_case columns)')
    args = parser.parse_args()

    print("🎯 Diabetes Risk: Using Trained Model for Predictions")
    print("=" * 60)

    model_components = load_trained_model(args.model)
    if model_components is None:
        return 1

    results = load_results_metadata(args.model.parent / RESULTS_PATH.name)
    if results:
        evaluation = results.get('evaluation', {})
        print("\n📊 Model Performance (test partition):")
        print(f"   AUC: {evaluation.get('auc', float('nan')):.3f}")

    data = pd.read_csv(args.data) if args.data else create_example_data()

    results_df = make_predictions(model_components, data)
    display_predictions(data, results_df, model_components['optimal_threshold'])
    return 0


if __name__ == "__main__":
    sys.exit(main())
