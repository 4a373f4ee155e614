"""Analyze shell scripts with a generative-AI model from the browser."""

__version__ = "0.1.0"
