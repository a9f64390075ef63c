"""releasecheck: A validator for release manifest trees.

This package provides a command-line tool that checks a directory of
per-provider release manifests against declarative version-compliance
requests, along with a set of structural consistency checks.
"""

__version__ = "0.4.0"
__author__ = "Livrädo Sandoval"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]
