"""DSPy agents used by the classification cascade."""
