"""Leave module — leave requests, approvals, and gateway."""
