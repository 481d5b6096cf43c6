"""
Budget pacing core for advertising accounts.

Aggregates spend from ad platforms, compares it against a linear ideal-spend
line over the budget period, and derives forecasts, daily spend targets,
portfolio totals and advisories.
"""

__version__ = "0.1.0"
