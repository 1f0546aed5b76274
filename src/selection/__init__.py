"""Node selection and overlay state.

This module keeps detail-panel state consistent with the active timeline.
"""
