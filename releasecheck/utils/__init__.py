"""
Utilities for releasecheck.
"""
