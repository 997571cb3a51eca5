"""Load documentation blocks from files and folders."""

import json
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from docconform.models import DocumentationBlock, SourceLocation
from docconform.utils.logging_config import get_logger

logger = get_logger()

RECORD_EXTENSIONS = {".json", ".jsonl"}
MARKUP_EXTENSIONS = {
    ".rdoc": "rdoc",
    ".txt": "rdoc",
    ".md": "markdown",
}


def is_supported_file(path: Path) -> bool:
    """Check if file extension is supported."""
    suffix = path.suffix.lower()
    return suffix in RECORD_EXTENSIONS or suffix in MARKUP_EXTENSIONS


def scan_folder(
    folder_path: Path,
    recursive: bool = True,
) -> List[Path]:
    """Scan a folder for files holding documentation blocks.

    Args:
        folder_path: Root folder to scan
        recursive: Whether to scan subdirectories

    Returns:
        Sorted list of supported files

    Raises:
        FileNotFoundError: If folder doesn't exist
        ValueError: If path is not a directory
    """
    if not folder_path.exists():
        raise FileNotFoundError(f"Folder not found: {folder_path}")

    if not folder_path.is_dir():
        raise ValueError(f"Path is not a directory: {folder_path}")

    logger.info(f"Scanning folder: {folder_path} (recursive={recursive})")

    pattern = "**/*" if recursive else "*"
    files = [
        file_path
        for file_path in folder_path.glob(pattern)
        if file_path.is_file() and is_supported_file(file_path)
    ]

    # Sort for deterministic ordering
    files.sort()

    logger.info(f"Found {len(files)} supported files")

    return files


def load_file(path: Path, default_markup: str = "rdoc") -> List[DocumentationBlock]:
    """Load the blocks stored in one file.

    ``.json`` files hold a list of block records or ``{"blocks": [...]}``;
    ``.jsonl`` files hold one record per line. Any other supported file is
    a single block named after the file stem.

    Args:
        path: File to load
        default_markup: Markup for records that do not declare one

    Returns:
        Blocks in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is unsupported or a record is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix == ".json":
        data = json.loads(text)
        if isinstance(data, dict):
            data = data.get("blocks")
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of blocks in {path}")
        return [_to_block(record, path, default_markup) for record in data]

    if suffix == ".jsonl":
        return [
            _to_block(json.loads(line), path, default_markup)
            for line in text.splitlines()
            if line.strip()
        ]

    if suffix in MARKUP_EXTENSIONS:
        return [
            DocumentationBlock(
                method=path.stem,
                text=text,
                location=SourceLocation(
                    file=str(path), line_start=1, line_end=len(text.splitlines()) or 1
                ),
                markup=MARKUP_EXTENSIONS[suffix],
            )
        ]

    raise ValueError(f"Unsupported file type: {path.suffix}")


def load_blocks(
    paths: List[Path],
    recursive: bool = True,
    default_markup: str = "rdoc",
) -> List[DocumentationBlock]:
    """Load blocks from files and folders, in argument order.

    Args:
        paths: Files or folders to load
        recursive: Whether to scan subfolders of folder arguments
        default_markup: Markup for records that do not declare one

    Returns:
        All loaded blocks
    """
    blocks: List[DocumentationBlock] = []
    for path in paths:
        files = scan_folder(path, recursive=recursive) if path.is_dir() else [path]
        for file_path in files:
            loaded = load_file(file_path, default_markup=default_markup)
            logger.debug(f"Loaded {len(loaded)} blocks from {file_path}")
            blocks.extend(loaded)

    logger.info(f"Loaded {len(blocks)} blocks from {len(paths)} path(s)")
    return blocks


def _to_block(record: Any, path: Path, default_markup: str) -> DocumentationBlock:
    """Validate one JSON record as a block, defaulting its location to the file."""
    if not isinstance(record, dict):
        raise ValueError(f"Block record must be an object in {path}: {record!r}")

    data = dict(record)
    data.setdefault("markup", default_markup)
    location: Optional[Any] = data.get("location")
    if location is None:
        data["location"] = {"file": str(path)}

    try:
        return DocumentationBlock.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid block record in {path}: {e}") from e
