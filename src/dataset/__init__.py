"""Dataset schema and resource access.

This module turns untrusted dataset resources into validated snapshot
models. It is the only place raw JSON payloads are inspected.
"""
