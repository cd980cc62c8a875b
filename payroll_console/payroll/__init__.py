"""Payroll module — payroll runs, processing, and gateway."""
