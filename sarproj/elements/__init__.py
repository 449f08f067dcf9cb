"""
The metadata structures consumed by the projection model and grid consistency checks.
"""

__classification__ = "UNCLASSIFIED"
