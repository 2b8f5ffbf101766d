"""
Rentbook - Source Package

Bookkeeping for a two-partner apartment rental business: income entries,
expenses and partner withdrawals go in, monthly summaries, manager
commission and partner balances come out.

DESIGN PRINCIPLES:
1. Records are validated before they reach storage
2. Derived figures are always recomputed, never trusted from storage
3. Storage failures are surfaced, never collapsed into zero
4. All partners see the same shared ledger
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Rentbook Team"
