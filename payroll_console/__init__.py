"""Payroll Console — payroll & HR administration over a remote payroll service."""

__version__ = "1.0.0"
