"""Sensitivity analysis implementation using Sobol indices.

This module runs a global, variance-based sensitivity analysis of the forest
growth model. Two independent parameter ensembles are drawn from the
configured distributions, combined into a Saltelli design, every design row
is simulated, each trajectory is reduced to scalar metrics, and first-order
and total-effect Sobol indices (with optional bootstrap intervals) are
estimated for each metric.

Features:
    - Independent random base ensembles with a configurable validity policy
    - Saltelli design (scheme A, N(p+2) rows, or symmetric scheme B)
    - Parallel, order-preserving model execution
    - Bootstrap confidence intervals
    - Result tables, raw metric vectors and plots saved to disk

Limitations:
    - Second-order indices are not currently supported
    - A single failed run fails the whole analysis

References:
    - Saltelli, A., et al. (2008). Global Sensitivity Analysis: The Primer
    - Sobol, I.M. (2001). Global sensitivity indices for nonlinear mathematical models

Typical usage example:

    from forestgrowth_tools import ForestGrowthModel
    from forestgrowth_tools.sa import SensitivityAnalysis, SensitivityAnalysisConfig

    config = SensitivityAnalysisConfig.reference(samples=1000, nboot=300)
    sa = SensitivityAnalysis(ForestGrowthModel(), config)
    results = sa.run("output_directory")
    print(results['max_carbon'].to_frame())
"""

# Model and config
from ..model import Model
from .config import SensitivityAnalysisConfig
from .design import SobolDesign
from .sampler import sample_ensembles
from ..utils.results import SensitivityResults

# Plotting
import matplotlib.pyplot as plt

# Logging
import logging

# Data and saving
import numpy as np
import os
import json


class SensitivityAnalysis:
    """Global sensitivity analysis using Sobol indices.

    Attributes:
        model (Model): The model instance to analyze. Must implement
            run_parallel and evaluate_model.
        config (SensitivityAnalysisConfig): Scenario and sampling settings.
        rng (np.random.Generator): Generator seeded from `config.seed`, used
            for sampling and then for the bootstrap.
        design (SobolDesign | None): Design of the last run.
        metrics (dict[str, np.ndarray] | None): Metric vectors of the last run,
            aligned with the design rows.

    Example:
        ```python
        sa = SensitivityAnalysis(ForestGrowthModel(), config)
        results = sa.run()
        ```
    """

    def __init__(
        self,
        model: Model,
        config: SensitivityAnalysisConfig,
    ):
        """Initialize the SensitivityAnalysis with model and configuration.

        Args:
            model (Model): The model instance to perform sensitivity analysis on.
            config (SensitivityAnalysisConfig): Configuration containing the
                parameter space, metrics, and execution parameters.
        """
        self.model = model
        self.config = config
        self.rng = np.random.default_rng(config.seed)
        self.design = None
        self.metrics = None

    def _get_samples(self, res_dir: str = None) -> SobolDesign:
        """Draw the base ensembles and build the Saltelli design.

        Args:
            res_dir (str, optional): Directory where the design is saved as
                "sample.npy" for reproducibility. Not saved if None.

        Returns:
            SobolDesign: The design matrix.
        """
        logging.info("Drawing parameter ensembles.")

        X1, X2 = sample_ensembles(
            self.config.space.get_search_space(),
            n=self.config.samples,
            rng=self.rng,
            policy=self.config.policy
        )
        design = SobolDesign(X1, X2, scheme=self.config.scheme)
        logging.info(
            f"Design has {len(design)} rows "
            f"(N={design.n}, p={design.p}, scheme {design.scheme})."
        )

        if res_dir is not None:
            np.save(f"{res_dir}/sample.npy", design.X.to_numpy())

        return design

    def _run_kwargs(self) -> dict:
        run_kwargs = dict(self.model.run_kwargs)
        run_kwargs.update(self.config.solver)
        run_kwargs["times"] = self.config.time.to_array()
        run_kwargs["c0"] = self.config.c0
        if self.config.parameters:
            run_kwargs["params"] = dict(self.config.parameters)
        return run_kwargs

    def _get_metrics(self, outputs) -> dict[str, np.ndarray]:
        """Reduce every model output to the configured metrics.

        Args:
            outputs: Model outputs in design row order.

        Returns:
            dict[str, np.ndarray]: Metric name to one value per design row.
        """
        metrics = {name: [] for name in self.config.metric.names}

        for out in outputs:
            values = self.model.evaluate_model(
                out,
                metric_config=self.config.metric,
                **self.model.eval_kwargs
            )
            for k in values.keys():
                metrics[k].append(values[k])

        return {k: np.asarray(v, dtype=float) for k, v in metrics.items()}

    def _analyze(
        self,
        design: SobolDesign,
        metrics: dict[str, np.ndarray]
    ) -> SensitivityResults:
        """Compute the Sobol indices for every metric.

        Args:
            design (SobolDesign): Design the outputs were produced from.
            metrics (dict[str, np.ndarray]): Metric vectors aligned with the
                design rows.

        Returns:
            SensitivityResults: Metric name to SensitivityResult.
        """
        results = SensitivityResults()
        for name, y in metrics.items():
            logging.info(f"Analyzing indices for {name}.")
            results[name] = design.analyze(
                y,
                nboot=self.config.nboot,
                conf=self.config.conf,
                rng=self.rng
            )
        return results

    def run(self, out_dir: str = None, progress: bool = True) -> SensitivityResults:
        """Execute the complete sensitivity analysis workflow.

        1. Draw the base ensembles and build the design
        2. Execute model runs in parallel for all design rows
        3. Reduce each trajectory to the configured metrics
        4. Estimate first-order and total-effect indices per metric
        5. Optionally save results and plots

        Args:
            out_dir (str, optional): Output directory. When given, 'plots' and
                'sa_results' subdirectories are created and filled.
            progress (bool, optional): Show a progress bar. Defaults to True.

        Returns:
            SensitivityResults: Metric name to SensitivityResult.

        Raises:
            InvalidParameter, IntegrationFailure: If any design row fails to
                run; the analysis needs every row.
            DegenerateVariance: If a metric does not vary across the design.
        """
        plt_dir = res_dir = None
        if out_dir is not None:
            plt_dir = os.path.join(out_dir, "plots")
            res_dir = os.path.join(out_dir, "sa_results")

            logging.info(f"Plots will be saved in: {plt_dir}")
            logging.info(f"Results will be saved in: {res_dir}")

            os.makedirs(plt_dir, exist_ok=True)
            os.makedirs(res_dir, exist_ok=True)

        design = self._get_samples(res_dir=res_dir)

        logging.info("Running model with samples.")
        outputs = self.model.run_parallel(
            X=design.parameter_sets(),
            workers=self.config.workers,
            return_on_fail=False,
            progress=progress,
            **self._run_kwargs()
        )

        metrics = self._get_metrics(outputs)
        self.design, self.metrics = design, metrics

        results = self._analyze(design, metrics)

        if res_dir is not None:
            with open(os.path.join(res_dir, "metrics.json"), "w") as f:
                json.dump({k: v.tolist() for k, v in metrics.items()}, f, indent=4)
            results.save(res_dir)

        if plt_dir is not None:
            self.plot(design, metrics, results, plt_dir)

        return results

    def plot(
        self,
        design: SobolDesign,
        metrics: dict[str, np.ndarray],
        results: SensitivityResults,
        plt_dir: str
    ):
        """Create plots of the sensitivity analysis results.

        Creates, for every metric:
        - a bar chart of first-order and total-effect indices, with bootstrap
          intervals as error bars when available
        - a scatter plot of the metric against each parameter over the first
          base ensemble

        Args:
            design (SobolDesign): Design the metrics were computed on.
            metrics (dict[str, np.ndarray]): Metric vectors in design row order.
            results (SensitivityResults): Indices per metric.
            plt_dir (str): Directory path where plot files will be saved.
        """

        logging.info("Creating plots.")

        x = np.arange(len(design.names))
        width = 0.4

        for name, result in results.items():
            fig, ax = plt.subplots(figsize=(8, 5))

            for offset, key, conf in (
                (-width / 2, "S1", result.S1_conf),
                (width / 2, "ST", result.ST_conf)
            ):
                values = getattr(result, key)
                yerr = None
                if conf is not None:
                    yerr = np.abs(conf - values)
                ax.bar(x + offset, values, width, yerr=yerr, capsize=4, label=key)

            ax.set_xticks(x)
            ax.set_xticklabels(design.names)
            ax.set_ylabel('Sobol Index')
            ax.set_title(f'Sobol Indices for {name}')
            ax.legend()
            ax.grid(True, axis='y')

            plt.tight_layout()
            plt.savefig(f"{plt_dir}/indices_{name}.png")
            plt.close(fig)

        base = design.X1.to_numpy()
        for name, y in metrics.items():
            fig, axes = plt.subplots(1, design.p, figsize=(4 * design.p, 4), sharey=True)
            axes = np.atleast_1d(axes)

            for i, param in enumerate(design.names):
                axes[i].scatter(base[:, i], y[:design.n], s=4, alpha=0.5)
                axes[i].set_xlabel(param)
                axes[i].grid(True)

            axes[0].set_ylabel(name)
            fig.suptitle(f'{name} vs parameters')
            plt.tight_layout()
            plt.savefig(f"{plt_dir}/{name}_vs_parameters.png")
            plt.close(fig)
