"""Pipeline stages, one module per model call."""
