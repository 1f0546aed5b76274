"""Dataset loading.

This module resolves algorithm and variant ids to dataset resources and
produces validated datasets or typed load failures.
"""
