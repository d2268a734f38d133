"""
Spoken output for run announcements.
"""
