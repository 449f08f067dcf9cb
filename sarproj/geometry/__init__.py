"""
Image projection geometry.
"""

__classification__ = "UNCLASSIFIED"
