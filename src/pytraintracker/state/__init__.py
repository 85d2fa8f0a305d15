"""State/store layer.

This package is the single source of truth for how fleet snapshots,
search results and manual selection are merged into one fleet state.
"""
