"""
Curved state label placement for fantasy maps.
"""

__version__ = "0.1.0"
