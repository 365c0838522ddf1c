"""
Stratified train/test splitting for the prepared dataset.
"""

import pandas as pd
from typing import Tuple, Dict, Any
from sklearn.model_selection import train_test_split

from ..config.settings import AnalysisConfig


def stratified_split(df: pd.DataFrame,
                     outcome: str = AnalysisConfig.OUTCOME,
                     train_fraction: float = AnalysisConfig.TRAIN_FRACTION,
                     random_state: int = AnalysisConfig.RANDOM_SEED,
                     verbose: bool = True) -> Tuple[pd.DataFrame, pd.DataFrame, Dict[str, Any]]:
    """
    Split into training and evaluation partitions, stratified by outcome label.

    Each label keeps its share of records in both partitions, up to the
    rounding implied by integer partition sizes.

    Args:
        df: Prepared dataset with a binary outcome column
        outcome: Outcome column name
        train_fraction: Share of records in the training partition
        random_state: Seed for the split
        verbose: Whether to print progress information

    Returns:
        Tuple of (train_df, test_df, split_stats)
    """
    if outcome not in df.columns:
        raise ValueError(f"Outcome column '{outcome}' not found")
    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

    train_df, test_df = train_test_split(
        df,
        train_size=train_fraction,
        stratify=df[outcome],
        random_state=random_state
    )

    # Keep original record order within each partition
    train_df = train_df.sort_index().copy()
    test_df = test_df.sort_index().copy()

    split_stats = {
        'train_shape': train_df.shape,
        'test_shape': test_df.shape,
        'train_positives': int(train_df[outcome].sum()),
        'test_positives': int(test_df[outcome].sum()),
        'train_class_dist': train_df[outcome].value_counts().sort_index().to_dict(),
        'test_class_dist': test_df[outcome].value_counts().sort_index().to_dict(),
        'random_state': random_state,
    }

    if verbose:
        print(f"Train: {len(train_df)} obs, {split_stats['train_positives']} diabetic")
        print(f"Test: {len(test_df)} obs, {split_stats['test_positives']} diabetic")

    return train_df, test_df, split_stats
