"""
Terminal client for Onu lobbies.
"""

__version__ = "1.0.0"
