"""
Filesystem path helpers for the export tree.
"""
