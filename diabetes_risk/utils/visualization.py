"""
Visualization utilities for diabetes risk analysis.
"""

import matplotlib.pyplot as plt
import seaborn as sns
import pandas as pd
from typing import Optional, Tuple
from pathlib import Path

from ..config.settings import FIGURES_DIR, AnalysisConfig
from ..models.evaluation import ROCCurve

# Set style for consistent plots
plt.style.use('default')
sns.set_palette("husl")

STATUS_COLUMN = 'Diabetes'
STATUS_ORDER = ['No', 'Yes']


class DiabetesVisualizer:
    """
    Visualization utilities for diabetes risk analysis.

    Provides the descriptive plots by diabetes status and the ROC curve of
    the fitted model.
    """

    def __init__(self, save_dir: Optional[Path] = None, figsize: Tuple[int, int] = (7, 4),
                 outcome: str = AnalysisConfig.OUTCOME, verbose: bool = True):
        """
        Initialize the visualizer.

        Args:
            save_dir: Directory to save figures. If None, uses default from config.
            figsize: Default figure size for plots.
            outcome: Binary outcome column
            verbose: Whether to print saved file paths
        """
        self.save_dir = Path(save_dir) if save_dir is not None else FIGURES_DIR
        self.figsize = figsize
        self.outcome = outcome
        self.verbose = verbose

    def _with_status(self, data: pd.DataFrame) -> pd.DataFrame:
        """Add a 'Diabetes' column with No/Yes labels for plotting."""
        plot_data = data.copy()
        plot_data[STATUS_COLUMN] = pd.Categorical(
            plot_data[self.outcome].map({0: 'No', 1: 'Yes'}), categories=STATUS_ORDER
        )
        return plot_data

    def box_plot(self, data: pd.DataFrame, y: str = 'bmi',
                 title: str = "BMI Distribution by Diabetes Status",
                 ylabel: str = "Body Mass Index (kg/m²)",
                 save_name: Optional[str] = None) -> plt.Figure:
        """
        Create a box plot of a numeric variable by diabetes status.

        Args:
            data: Prepared dataset
            y: Column name for y-axis (numerical)
            title: Plot title
            ylabel: Y-axis label
            save_name: Filename to save the plot

        Returns:
            matplotlib Figure object
        """
        plot_data = self._with_status(data)
        fig, ax = plt.subplots(figsize=(6, 4))

        sns.boxplot(data=plot_data, x=STATUS_COLUMN, y=y, hue=STATUS_COLUMN,
                    order=STATUS_ORDER, ax=ax, legend=False)
        for patch in ax.patches:
            patch.set_alpha(0.7)

        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.set_xlabel(STATUS_COLUMN, fontsize=12)
        ax.set_ylabel(ylabel, fontsize=12)

        plt.tight_layout()

        if save_name:
            self._save_figure(fig, save_name)

        return fig

    def density_plot(self, data: pd.DataFrame, column: str = 'age',
                     title: str = "Age Distribution by Diabetes Status",
                     xlabel: str = "Age (years)",
                     save_name: Optional[str] = None) -> plt.Figure:
        """
        Create overlaid density plots of a numeric variable by diabetes status.

        Args:
            data: Prepared dataset
            column: Column name to plot distribution for
            title: Plot title
            xlabel: X-axis label
            save_name: Filename to save the plot

        Returns:
            matplotlib Figure object
        """
        plot_data = self._with_status(data)
        fig, ax = plt.subplots(figsize=self.figsize)

        sns.kdeplot(data=plot_data, x=column, hue=STATUS_COLUMN, hue_order=STATUS_ORDER,
                    fill=True, alpha=0.5, common_norm=False, ax=ax)

        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.set_xlabel(xlabel, fontsize=12)
        ax.set_ylabel('Density', fontsize=12)

        plt.tight_layout()

        if save_name:
            self._save_figure(fig, save_name)

        return fig

    def scatter_smooth_plot(self, data: pd.DataFrame, x: str = 'age', y: str = 'bmi',
                            title: str = "Age vs BMI by Diabetes Status",
                            xlabel: str = "Age (years)", ylabel: str = "BMI",
                            save_name: Optional[str] = None) -> plt.Figure:
        """
        Create a scatter plot with a LOWESS smoother per diabetes status.

        Args:
            data: Prepared dataset
            x: Column name for x-axis
            y: Column name for y-axis
            title: Plot title
            xlabel: X-axis label
            ylabel: Y-axis label
            save_name: Filename to save the plot

        Returns:
            matplotlib Figure object
        """
        plot_data = self._with_status(data)
        fig, ax = plt.subplots(figsize=(7, 5))
        palette = sns.color_palette(n_colors=len(STATUS_ORDER))

        sns.scatterplot(data=plot_data, x=x, y=y, hue=STATUS_COLUMN, hue_order=STATUS_ORDER,
                        palette=palette, alpha=0.3, s=10, ax=ax)

        for color, status in zip(palette, STATUS_ORDER):
            subset = plot_data[plot_data[STATUS_COLUMN] == status]
            if len(subset) > 2:
                sns.regplot(data=subset, x=x, y=y, lowess=True, scatter=False,
                            color=color, ax=ax)

        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.set_xlabel(xlabel, fontsize=12)
        ax.set_ylabel(ylabel, fontsize=12)

        plt.tight_layout()

        if save_name:
            self._save_figure(fig, save_name)

        return fig

    def roc_curve_plot(self, roc: ROCCurve, optimal_threshold: Optional[float] = None,
                       save_name: Optional[str] = None) -> plt.Figure:
        """
        Plot the ROC curve with the chance diagonal and AUC in the title.

        Args:
            roc: ROC curve of the fitted model on the test partition
            optimal_threshold: Threshold to mark on the curve
            save_name: Filename to save the plot

        Returns:
            matplotlib Figure object
        """
        fig, ax = plt.subplots(figsize=(6, 6))

        ax.plot(roc.fpr, roc.tpr, color='blue', linewidth=2)
        ax.plot([0, 1], [0, 1], linestyle='--', color='gray')

        if optimal_threshold is not None:
            idx = (abs(roc.thresholds - optimal_threshold)).argmin()
            ax.scatter(roc.fpr[idx], roc.tpr[idx], color='black', zorder=3,
                       label=f'Youden threshold = {optimal_threshold:.3f}')
            ax.legend(loc='lower right')

        ax.set_title(f"ROC Curve (AUC = {roc.auc:.3f})", fontsize=14, fontweight='bold')
        ax.set_xlabel('False Positive Rate (1 - Specificity)', fontsize=12)
        ax.set_ylabel('True Positive Rate (Sensitivity)', fontsize=12)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1)

        plt.tight_layout()

        if save_name:
            self._save_figure(fig, save_name, dpi=100)

        return fig

    def _save_figure(self, fig: plt.Figure, filename: str, dpi: int = 300) -> Path:
        """
        Save figure to file.

        Args:
            fig: matplotlib Figure object
            filename: Name of the file (without extension)
            dpi: Resolution for saved figure

        Returns:
            Path of the saved file
        """
        # Ensure save directory exists
        self.save_dir.mkdir(parents=True, exist_ok=True)

        # Add .png extension if not present
        if not filename.endswith(('.png', '.pdf', '.svg', '.jpg', '.jpeg')):
            filename += '.png'

        filepath = self.save_dir / filename
        fig.savefig(filepath, dpi=dpi, bbox_inches='tight')
        if self.verbose:
            print(f"Figure saved: {filepath}")
        return filepath

    @staticmethod
    def close_all():
        """Close all figures to free memory."""
        plt.close('all')
