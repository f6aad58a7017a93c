"""Utility modules for docindex."""
