"""
Analysis module for diabetes risk analysis.

Descriptive statistics of the prepared dataset by diabetes status.
"""

from .descriptive import DescriptiveSummarizer

__all__ = ['DescriptiveSummarizer']
