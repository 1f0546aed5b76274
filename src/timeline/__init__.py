"""Step timeline state.

This module owns the active dataset, variant, and step index, and emits
the current projection to observers on every accepted transition.
"""
