"""
Data module for diabetes risk analysis.

This module provides data loading, preparation, stratified splitting and
synthetic data generation for the diabetes risk analysis project.
"""

from .loader import NHANESDataLoader
from .splitting import stratified_split
from .synthetic import SyntheticNHANESGenerator

__all__ = ['NHANESDataLoader', 'stratified_split', 'SyntheticNHANESGenerator']
