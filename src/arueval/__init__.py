"""arueval — acoustic classifier evaluation against human-verified tags.

Precision/recall/F-score threshold sweeps for automated species classifiers
on ARU recordings, and discovery of species the classifier found that no
human listener tagged.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("arueval")
except PackageNotFoundError:
    # Fallback for source-only usage before installation.
    __version__ = "1.0.0"
__license__ = "Apache-2.0"
