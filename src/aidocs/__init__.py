# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/__init__.py

"""aidocs - incremental, fingerprinted AI document generation."""

__version__ = "0.1.0"
