"""External data services."""
