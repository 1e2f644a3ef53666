"""
paramguard: track, version and archive small configuration files.
"""

__version__ = "0.1.0"
