"""Content layer — authored pages and the site snapshot.

Handles frontmatter parsing, page loading and file watching.
"""

from vellum.content.loader import Snapshot, load_snapshot
from vellum.content.page import Page, Pagination, derive_collections
from vellum.content.watcher import ContentWatcher, categorize_change

__all__ = [
    "ContentWatcher",
    "Page",
    "Pagination",
    "Snapshot",
    "categorize_change",
    "derive_collections",
    "load_snapshot",
]
