"""Cost Chain - ingredient, recipe and product cost propagation."""

from .utils.constants import APP_VERSION as __version__

__all__ = ["__version__"]
