"""notegrid: formula evaluation for grids embedded in notes."""

__version__ = "0.1.0"
