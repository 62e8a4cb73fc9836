"""Plotting of replayed flights."""

from flightcore.eval.plots import plot_ground_track, plot_vario_trace, save_figure

__all__ = [
    "plot_vario_trace",
    "plot_ground_track",
    "save_figure",
]
