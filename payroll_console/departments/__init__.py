"""Departments module — department list, form, and gateway."""
