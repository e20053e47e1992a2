"""Expense API server package."""
