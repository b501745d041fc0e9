"""
Material delivery ledger.

Records per-day deliveries to clients, prices them against each client's
per-material rates, and reports totals over time periods.
"""

__version__ = "0.1.0"
