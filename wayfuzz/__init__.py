"""wayfuzz: historical URL harvesting from the web archive index."""

__version__ = "0.1.0"
