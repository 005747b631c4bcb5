"""
pathdigest - turn a directory, a single file or a Git repository into one
prompt-friendly text digest.

The package walks the source tree, filters entries through include/exclude
patterns and a built-in deny-list, and renders the tree plus the text
content of every accepted file for use as context with large language
models.
"""

__version__ = "0.1.0"
__author__ = "pathdigest Team"
