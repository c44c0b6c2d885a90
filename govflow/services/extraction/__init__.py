"""Document field extraction."""
