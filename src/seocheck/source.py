"""Discovery and parsing of the built HTML documents."""

import logging
from pathlib import Path
from typing import List, Union
from urllib.parse import unquote

from bs4 import BeautifulSoup

from seocheck.models import Document

logger = logging.getLogger(__name__)


def discover_documents(root: Union[str, Path]) -> List[Path]:
    """Find every HTML file below the site root.

    Args:
        root: Output directory of the site build

    Returns:
        Sorted list of absolute file paths
    """
    root = Path(root)
    return sorted(p for p in root.rglob("*.html") if p.is_file())


def normalize_path(path: str) -> str:
    """Normalize a site path to its logical document form.

    Query and fragment are dropped, percent-escapes decoded, a trailing
    ``index.html`` is removed (keeping the slash), any other ``.html`` suffix
    is removed, and the result always starts with ``/``.

    >>> normalize_path("blog/post/index.html")
    '/blog/post/'
    >>> normalize_path("/about.html")
    '/about'
    """
    path = path.split("#", 1)[0].split("?", 1)[0]
    path = unquote(path).replace("\\", "/")

    if path.endswith("/index.html") or path == "index.html":
        path = path[: -len("index.html")]
    elif path.endswith(".html"):
        path = path[: -len(".html")]

    if not path.startswith("/"):
        path = "/" + path
    return path


def normalize_html_file_path(file_path: Union[str, Path], root: Union[str, Path]) -> str:
    """Logical path of an HTML file relative to the site root."""
    relative = Path(file_path).resolve().relative_to(Path(root).resolve())
    return normalize_path(relative.as_posix())


def comparable_path(path: str) -> str:
    """Path form used for equality checks: normalized, no trailing slash."""
    path = normalize_path(path)
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def load_document(file_path: Union[str, Path], root: Union[str, Path]) -> Document:
    """Read and parse one HTML file.

    Args:
        file_path: Absolute path of the HTML file
        root: Output directory of the site build

    Returns:
        Parsed Document

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    file_path = Path(file_path)
    relative = file_path.resolve().relative_to(Path(root).resolve()).as_posix()

    html = file_path.read_text(encoding="utf-8")
    soup = BeautifulSoup(html, "lxml")

    return Document(
        path=normalize_html_file_path(file_path, root),
        source_path="/" + relative,
        file_path=file_path,
        html=html,
        soup=soup,
    )
