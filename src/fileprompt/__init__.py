"""
fileprompt - A tool for turning files and directory trees into one LLM prompt.

This package walks the given paths, filters entries through hidden-file,
extension and gitignore-style rules, and writes the surviving files as plain
text, Claude XML or Markdown for pasting into a large language model.
"""

__version__ = "0.1.0"
__author__ = "fileprompt Team"
