"""File loaders producing rows + headers grids."""

from data_consistency.loaders.grid_loader import GridLoader

__all__ = ["GridLoader"]
