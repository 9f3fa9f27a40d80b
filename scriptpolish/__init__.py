"""ScriptPolish backend: rewrites video scripts in a creator's own voice."""

__version__ = "1.0.0"
