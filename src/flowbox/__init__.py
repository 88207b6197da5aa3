"""flowbox - Run SQL workflow commands in isolated Docker containers."""

__version__ = "0.3.0"
