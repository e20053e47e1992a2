"""
Expense Tracker - Source Package

A small personal-finance tracker: record expenses, list and filter them
with a running total, and see how spending splits across categories.

DESIGN PRINCIPLES:
1. One repository, two interchangeable backends (local slot, remote API)
2. The active backend is an explicit value held by the repository
3. Every record exposes the same `identifier`, whatever the backend calls it
4. Failures come back as results, never as stray exceptions
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
