"""chatrelay command-line interface."""
