"""Employees module — employee list, profile, form, and gateway."""
