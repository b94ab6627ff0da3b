"""
Project Packer: flatten a source tree into one LLM-ready text bundle, and back.

This tool produces and parses plain-text bundles suitable for LLM prompting:
- A "Project Structure" tree followed by framed file contents
- A tolerant decoder that restores files from pasted or LLM-edited bundles
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
