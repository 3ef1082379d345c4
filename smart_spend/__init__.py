"""
Smart Spend - Source Package

A personal expense tracker. Transactions are entered by hand or extracted
from free text and receipt photos by Gemini, stored locally, and summarized
on a small dashboard.

DESIGN PRINCIPLES:
1. AI extracts → Store records → Dashboard recomputes
2. A failed extraction never changes stored data
3. Derived numbers are recomputed on every read, never cached
4. Storage backend is swappable
"""

__version__ = "1.0.0"
__author__ = "Smart Spend Team"
