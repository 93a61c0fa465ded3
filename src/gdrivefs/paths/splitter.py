"""Pure path helpers: no I/O, no Drive calls."""

from __future__ import annotations

from dataclasses import dataclass

from gdrivefs.config.options import PathMode

NameKey = tuple[str, str]


def normalize_path(path: str) -> str:
    """Drop empty segments and surrounding slashes: '/a//b/' -> 'a/b'."""
    return "/".join(s for s in path.replace("\\", "/").split("/") if s)


def join_path(dirname: str, name: str) -> str:
    dirname = normalize_path(dirname)
    return f"{dirname}/{name}" if dirname else name


def dirname(path: str) -> str:
    """Parent path ('' for top-level entries and the root)."""
    path = normalize_path(path)
    if "/" not in path:
        return ""
    return path.rsplit("/", 1)[0]


def split_path(
    path: str,
    root_id: str,
    *,
    immediate_parent: bool = True,
) -> NameKey:
    """
    Split a path into (parent_key, leaf).

    The root ('' or '/') splits into (root_id, root_id). With
    immediate_parent the parent key is the second-to-last segment (paths made
    of object ids); otherwise it is every preceding segment joined with '/'
    (paths made of names). An empty parent key becomes root_id.
    """
    segments = normalize_path(path).split("/")
    if segments == [""]:
        return root_id, root_id

    leaf = segments.pop()
    if immediate_parent:
        parent = segments[-1] if segments else ""
    else:
        parent = "/".join(segments)

    return (parent or root_id), leaf


def split_file_extension(name: str) -> tuple[str, str]:
    """
    Split a display name into (filename, extension) on the last '.'.

    'archive.tar.gz' -> ('archive.tar', 'gz'); 'README' -> ('README', '').
    """
    if "." not in name:
        return name, ""
    filename, extension = name.rsplit(".", 1)
    return filename, extension


@dataclass(frozen=True)
class PathSplitter:
    """split_path bound to a root id and a path mode."""

    root_id: str
    mode: PathMode = PathMode.ID

    def split(self, path: str) -> NameKey:
        return split_path(
            path,
            self.root_id,
            immediate_parent=self.mode is PathMode.ID,
        )

    def is_root(self, path: str) -> bool:
        path = normalize_path(path)
        return path == "" or path == self.root_id
