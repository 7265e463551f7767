"""Unit generators, a live sampler, clustering, L-systems, OSC messaging and file I/O."""

__version__ = "0.1.0"

__all__ = ["fileio", "kmeans", "lebiniou", "lisa", "lsys", "mathlib", "osc", "ugens"]