"""
Relay between the rockfall prediction client and the external ML scoring service.
"""

__version__ = "1.0.0"
