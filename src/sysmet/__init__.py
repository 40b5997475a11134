"""sysmet – host resource metrics store, derived series and threshold checks."""

__version__ = "0.3.0"
