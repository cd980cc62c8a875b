"""Dashboard module — admin and employee summary screens."""
