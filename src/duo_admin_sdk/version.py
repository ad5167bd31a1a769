"""Version information for the Duo Admin Python SDK"""

__version__ = "0.1.0"
