"""
Complete diabetes risk analysis pipeline.

Steps, each run once in order:
- Data preparation (variable selection, complete-case exclusion, outcome recode)
- Descriptive statistics by diabetes status
- Stratified 70/30 train/test split
- Logistic regression fit with odds ratios and VIF check
- Test evaluation: ROC/AUC, Youden threshold, confusion matrix vs 0.5 threshold
- Plots, coefficients table, metrics and serialized model
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Dict, Any

from .config.settings import AnalysisConfig, ensure_output_dirs
from .data.loader import NHANESDataLoader
from .data.splitting import stratified_split
from .analysis.descriptive import DescriptiveSummarizer
from .models.regression import LogisticRiskModeler, Regressor, score_records
from .models.evaluation import ThresholdEvaluator, CurveBuilder
from .utils.visualization import DiabetesVisualizer
from .utils.reporting import ResultsReporter, key_findings


class DiabetesRiskPipeline:
    """
    End-to-end diabetes risk analysis.

    Each step stores its outputs on the pipeline and returns self so the
    steps can be chained.
    """

    def __init__(self, data_file: Optional[Path] = None,
                 raw_data: Optional[pd.DataFrame] = None,
                 random_state: int = AnalysisConfig.RANDOM_SEED,
                 output_dir: Optional[Path] = None,
                 regressor: Optional[Regressor] = None,
                 curve_builder: Optional[CurveBuilder] = None,
                 save_figures: bool = True,
                 verbose: bool = True):
        """
        Initialize the pipeline.

        Args:
            data_file: NHANES-layout CSV or Excel file. If None, uses default from config.
            raw_data: Already loaded raw table; takes precedence over data_file
            random_state: Seed for the train/test split
            output_dir: Root output directory. If None, uses default from config.
            regressor: Regression backend for the modeler
            curve_builder: ROC curve backend for the evaluator
            save_figures: Whether to render and save plots
            verbose: Whether to print progress information
        """
        self.random_state = random_state
        self.save_figures = save_figures
        self.verbose = verbose

        self.output_dir = ensure_output_dirs(output_dir)
        self.results_dir = self.output_dir / "results"
        self.figures_dir = self.output_dir / "figures"

        self.loader = NHANESDataLoader(data_file=data_file, raw_data=raw_data, verbose=verbose)
        self.summarizer = DescriptiveSummarizer(verbose=verbose)
        self.modeler = LogisticRiskModeler(regressor=regressor, verbose=verbose)
        self.evaluator = ThresholdEvaluator(curve_builder=curve_builder, verbose=False)
        self.visualizer = DiabetesVisualizer(save_dir=self.figures_dir, verbose=verbose)
        self.reporter = ResultsReporter(self.results_dir, verbose=verbose)

        self.data = None
        self.train_data = None
        self.test_data = None
        self.scored_test = None
        self.model = None
        self.vif_table = None
        self.evaluation = None
        self.results: Dict[str, Any] = {}

    def _section(self, title: str):
        if self.verbose:
            print(f"\n{title}")
            print("-" * 40)

    def load_and_prepare_data(self):
        """Load the survey extract and keep complete records."""
        self._section("📁 Data Preparation")

        self.data = self.loader.preprocess_data()

        if self.verbose:
            print("\nComplete vs incomplete cases:")
        comparison = self.summarizer.compare_complete_cases(self.loader.selected_data)

        self.results['data'] = {
            **self.loader.get_summary_statistics(),
            'missing_comparison': comparison.reset_index(),
        }
        return self

    def describe_data(self):
        """Summary statistics by diabetes status."""
        self._section("📊 Exploratory Analysis")

        summary = self.summarizer.summarize_by_outcome(self.data)
        self.results['descriptive'] = {
            'by_status': summary.reset_index(),
            'prevalence': self.summarizer.prevalence(self.data),
        }
        return self

    def split_data(self):
        """Stratified train/test split."""
        self._section("🔄 Train/Test Split")

        self.train_data, self.test_data, split_stats = stratified_split(
            self.data,
            train_fraction=AnalysisConfig.TRAIN_FRACTION,
            random_state=self.random_state,
            verbose=self.verbose
        )
        self.results['split'] = split_stats
        return self

    def fit_model(self):
        """Fit the logistic regression on the training partition."""
        self._section("🎯 Logistic Regression")

        self.model = self.modeler.fit(self.train_data)
        self.reporter.print_coefficients(self.model)

        self.results['model'] = {
            'coefficients': self.model.coefficients_table(),
            'key_findings': key_findings(self.model),
            'n_obs': self.model.n_obs,
            'n_events': self.model.n_events,
            'aic': self.model.aic,
            'log_likelihood': self.model.log_likelihood,
        }
        return self

    def check_multicollinearity(self):
        """VIF per design term on the training partition."""
        self._section("🔍 Multicollinearity Check")

        self.vif_table = self.modeler.check_multicollinearity(self.train_data)
        self.results['vif'] = self.vif_table
        return self

    def evaluate_on_test_set(self):
        """Score the test partition and evaluate thresholds."""
        self._section("📈 Model Evaluation")

        outcome = AnalysisConfig.OUTCOME
        self.scored_test = score_records(self.model, self.test_data)
        self.evaluation = self.evaluator.evaluate(
            self.scored_test[outcome].values, self.scored_test['pred_prob'].values
        )
        self.reporter.print_evaluation(self.evaluation)

        self.results['evaluation'] = self.evaluation.to_dict()
        return self

    def create_visualizations(self):
        """Descriptive plots and ROC curve; a failed plot does not stop the run."""
        if not self.save_figures:
            return self

        self._section("🖼️ Visualizations")

        plots = [
            ('bmi_diabetes_comparison',
             lambda: self.visualizer.box_plot(self.data, save_name='bmi_diabetes_comparison')),
            ('age_diabetes_distribution',
             lambda: self.visualizer.density_plot(self.data, save_name='age_diabetes_distribution')),
            ('age_bmi_diabetes',
             lambda: self.visualizer.scatter_smooth_plot(self.data, save_name='age_bmi_diabetes')),
            ('roc_curve',
             lambda: self.visualizer.roc_curve_plot(
                 self.evaluation.roc, self.evaluation.optimal_threshold, save_name='roc_curve')),
        ]

        for name, make_plot in plots:
            try:
                make_plot()
            except (OSError, ValueError, RuntimeError) as e:
                print(f"⚠️ Could not create plot '{name}': {e}")
            finally:
                self.visualizer.close_all()

        return self

    def save_results(self):
        """Write result files; a failed write does not affect computed metrics."""
        self._section("💾 Saving Results")

        writers = [
            lambda: self.reporter.write_coefficients(self.model),
            lambda: self.reporter.write_vif(self.vif_table),
            lambda: self.reporter.write_metrics(self.evaluation),
            lambda: self.reporter.write_results_json(self.results),
            lambda: self.reporter.save_model(self.model, self.evaluation.optimal_threshold),
        ]

        for write in writers:
            try:
                write()
            except (OSError, TypeError, ValueError) as e:
                print(f"⚠️ Could not write result file: {e}")

        return self

    def run_complete_pipeline(self) -> Dict[str, Any]:
        """Run every step in order and return the collected results."""
        if self.verbose:
            print("🚀 Starting Diabetes Risk Analysis")
            print("=" * 60)

        (self
         .load_and_prepare_data()
         .describe_data()
         .split_data()
         .fit_model()
         .check_multicollinearity()
         .evaluate_on_test_set()
         .create_visualizations()
         .save_results())

        if self.verbose:
            optimal = self.evaluation.optimal.metrics()
            print("\n🎉 Analysis complete!")
            print("=" * 60)
            print(f"   AUC: {self.evaluation.auc:.3f}")
            print(f"   Youden threshold: {self.evaluation.optimal_threshold:.3f}")
            for name in ['sensitivity', 'specificity', 'accuracy']:
                if name in optimal:
                    print(f"   {name.capitalize()}: {optimal[name]:.3f}")
            print(f"\n📁 Results saved to: {self.results_dir}")
            print(f"📊 Figures saved to: {self.figures_dir}")

        return self.results
