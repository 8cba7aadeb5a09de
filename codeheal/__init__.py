"""
Self-healing code repair engine.
"""

__project__ = "codeheal"
__version__ = "0.3.0"
