"""PayLite+Loans: simulated payments and flat-rate micro-loans."""

__version__ = "0.1.0"
