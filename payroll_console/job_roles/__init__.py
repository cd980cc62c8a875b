"""Job roles module — job role list, form, and gateway."""
