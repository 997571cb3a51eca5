"""Loading documentation blocks from disk."""

from .loader import load_blocks, load_file, scan_folder

__all__ = ["load_blocks", "load_file", "scan_folder"]
