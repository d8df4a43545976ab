"""
codesum - summarize a source tree for pasting into text-analysis tools.
"""

__version__ = "1.0.3"
