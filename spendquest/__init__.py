"""
SpendQuest - Source Package

Ledger and gamification engine for a personal expense tracker.

DESIGN PRINCIPLES:
1. The Ledger is the single owner of expenses, budgets and the profile
2. Every expense add flows through streaks, then achievements, then storage
3. Reads work on snapshots and never mutate
4. Storage is an opaque key-value store and is swappable
5. Storage failures are logged, never fatal
"""

__version__ = "1.0.0"
__author__ = "SpendQuest Team"
