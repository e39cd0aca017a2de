"""
Spindle Generator: layered application source code from entity metadata.
"""

__version__ = "0.1.0"
