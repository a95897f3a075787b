"""State/store layer.

This package is the single source of truth for a search session: the
filters and params a caller has accumulated and the last committed results.
Only the fetch coordinator drives its request lifecycle.
"""
