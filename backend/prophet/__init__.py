"""Prophet: binary-outcome betting backend with pooled payouts."""

__version__ = "0.1.0"
__author__ = "Prophet Team"

__all__ = ["__version__", "__author__"]
