# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/data/__init__.py

"""Persisted ledgers and the in-memory ledger registry."""
