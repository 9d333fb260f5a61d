"""
Command line tools for the new business tracker.
"""
