"""
Finance Compass - Source Package

A personal finance tracking calculator. Budget, savings and investment
ledgers go in; consistent summary figures (totals, growth ratios, net
worth, projected trend) come out.

DESIGN PRINCIPLES:
1. The calculation core is pure and total - no input makes it throw
2. Persisted data is read permissively and written canonically
3. Every state change goes through one entry point
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Compass Team"
