"""Event check-in package.

This package is organized by feature modules (attendees, imports, stats, ...)
around a single Registry service, with a thin Flask controller layer and
pluggable storage slots.
"""
