"""SAM.gov opportunity discovery and catalog matching."""
