"""
PyQt5 presentation layer for the run tracker.
"""
