"""MAX30102 pulse-oximeter driver with heart-rate and SpO2 estimation."""

__version__ = "0.1.0"
__all__ = ["algorithm", "max30102", "blood"]