"""Chilean payroll calculation and pay slip engine."""

__version__ = "1.0.0"
