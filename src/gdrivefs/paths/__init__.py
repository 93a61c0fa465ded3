from .splitter import (
    NameKey,
    PathSplitter,
    dirname,
    join_path,
    normalize_path,
    split_file_extension,
    split_path,
)

__all__ = [
    "NameKey",
    "PathSplitter",
    "dirname",
    "join_path",
    "normalize_path",
    "split_file_extension",
    "split_path",
]
