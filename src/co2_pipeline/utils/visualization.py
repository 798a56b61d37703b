# Contains utility functions for creating visualizations.
from pathlib import Path
from typing import Sequence, Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import seaborn as sns

from ..domain.co2.properties import MAX_VELOCITY, MIN_VELOCITY
from ..domain.models import OptimizationResult, SensitivityEntry
from .tables import candidates_frame, tornado_frame


def plot_tornado(entries: Sequence[SensitivityEntry], path: Union[str, Path]) -> Path:
    """Horizontal bars of the NPV change at -25% and +25%, largest spread on top"""
    frame = tornado_frame(entries)
    fig, ax = plt.subplots(figsize=(9, 0.6 * len(frame) + 1.5))
    drivers = list(frame.index)
    ax.barh(drivers, frame["low_delta"], color=sns.color_palette()[3], label="-25%")
    ax.barh(drivers, frame["high_delta"], color=sns.color_palette()[2], label="+25%")
    ax.axvline(0, color="black", linewidth=0.8)
    ax.invert_yaxis()
    ax.set_xlabel("Change in project NPV ($MM)")
    ax.set_title("NPV Sensitivity (Tornado)")
    ax.legend()
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return Path(path)


def plot_diameter_npv(result: OptimizationResult, path: Union[str, Path]) -> Path:
    """Project NPV and velocity against diameter, with the optimum marked"""
    frame = candidates_frame(result).reset_index()
    fig, (ax_npv, ax_velocity) = plt.subplots(2, 1, figsize=(9, 8), sharex=True)

    sns.lineplot(data=frame, x="diameter", y="project_npv", marker="o", ax=ax_npv)
    feasible = frame[frame["feasible"]]
    ax_npv.scatter(feasible["diameter"], feasible["project_npv"], color="green", zorder=3, label="Feasible")
    ax_npv.axvline(result.optimal_diameter, color="red", linestyle="--", label="Optimal")
    ax_npv.set_ylabel("Project NPV ($MM)")
    ax_npv.set_title("Diameter Optimization")
    ax_npv.legend()

    sns.lineplot(data=frame, x="diameter", y="velocity", marker="o", ax=ax_velocity)
    ax_velocity.axhspan(MIN_VELOCITY, MAX_VELOCITY, color="green", alpha=0.1)
    ax_velocity.set_xlabel("Outer diameter (in)")
    ax_velocity.set_ylabel("Velocity (m/s)")
    ax_velocity.set_yscale("log")

    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return Path(path)
