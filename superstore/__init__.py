"""
Superstore Profitability Analytics

Loads a retail transaction extract and reports on discount-driven profit
leakage, loss-making products, and the most and least profitable customers,
segments and places.
"""

__version__ = "1.0.0"
