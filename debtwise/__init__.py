"""
DebtWise - Ledger Core

A personal debt tracker: who owes whom, how much, and how reliably
they pay it back.

DESIGN PRINCIPLES:
1. The ledger service is the only writer
2. Fees and scores are recomputed from history, never trusted from cache
3. Time is always explicit
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "DebtWise Team"
