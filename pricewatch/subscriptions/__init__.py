"""
Topic subscription management.
"""
