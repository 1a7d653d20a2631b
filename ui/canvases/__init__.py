"""
Matplotlib canvas widgets that paint projected plot geometry.
"""
from ui.canvases.scatter_plot import ScatterPlotCanvas
from ui.canvases.polar_plot import PolarPlotCanvas

__all__ = ['ScatterPlotCanvas', 'PolarPlotCanvas']
