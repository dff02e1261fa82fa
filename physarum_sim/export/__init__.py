"""I/O package for the physarum simulation."""

from .csv_writer import CSVWriter
from .visualizer import Visualizer
from .reporter import Reporter

__all__ = ['CSVWriter', 'Visualizer', 'Reporter']
