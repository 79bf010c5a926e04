"""Route group exports."""

from . import health, matrix, sequences

__all__ = ["health", "matrix", "sequences"]
