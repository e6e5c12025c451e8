"""AlphaScan: market scanner, technical indicators and Shariah screening."""
