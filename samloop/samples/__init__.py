"""Ready-made SAM configurations used by tests and as wiring examples."""
