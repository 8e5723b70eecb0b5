"""
Core package for Flockr backend.

Configuration, database lifecycle, security helpers and the exception
hierarchy.
"""
