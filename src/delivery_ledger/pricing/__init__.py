"""
Quantity evaluation and pricing.

Pure functions only: no storage, no config, no printing.
"""
