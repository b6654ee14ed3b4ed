"""djay-sync package for copying djay tempo and key analysis into a music library.

Tempo values go to the library's BPM field; keys are written as Camelot
labels at the start of the grouping tag.
"""

__all__ = ["core", "library", "tables"]
__version__ = "1.0.0"
