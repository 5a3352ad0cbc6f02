"""
Household Tracker - Source Package

A small personal tracker for a single household:
weekly account balances, recurring chores, and a bi-weekly loan.

DESIGN PRINCIPLES:
1. Storage is the single source of truth
2. Everything derived is recomputed on every read
3. Reject bad input, never coerce it
4. Every user action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Tracker Team"
