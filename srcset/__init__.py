"""
srcset: generate responsive image variants and the <img> markup describing them.
"""

__version__ = "1.2.0"
