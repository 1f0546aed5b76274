"""Visualizer session wiring.

This module composes loader, timeline, and selection into one facade
for presentation collaborators.
"""
