"""
Church Office - Source Package

Administrative back-office for a church: monthly ledgers, tithes,
attendance, discipleship, payment flows, inventory and census.

DESIGN PRINCIPLES:
1. One active accounting period at a time
2. Validate before anything reaches the database
3. Services never touch the database directly, only the gateway
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Church Office Team"
