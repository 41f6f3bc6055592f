"""Silicon detector calibration and energy-loss comparison with LISE stopping-power tables."""

__version__ = "0.1.0"