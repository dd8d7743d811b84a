"""Implementations of the bucketio command-line programs."""
