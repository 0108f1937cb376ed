"""pulse — sleep analysis from heart rate and wrist motion."""

__version__ = "0.1.0"
