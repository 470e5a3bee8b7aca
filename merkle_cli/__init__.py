"""
Merkle CLI

Command-line interface for building and verifying balanced Merkle trees.

Usage:
    python -m merkle_cli root a.bin b.bin
    python -m merkle_cli verify 0x... a.bin b.bin
    python -m merkle_cli tree a.bin b.bin c.bin d.bin --json
"""

__version__ = "0.1.0"
