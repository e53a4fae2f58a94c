# SPDX-License-Identifier: AGPL-3.0-only

"""
Registry of uploaded PDFs and their rendered views.
"""

import logging
import os
import threading
import time
import uuid
from datetime import datetime, timedelta
from typing import Dict, List

from common.config import config
from common.errors import NotFoundError
from .document import DocumentView, open_document

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    In-memory document registry (process-local; not for multi-process).

    Documents older than `max_age_hours` are closed and their files deleted
    whenever a new one is registered.
    """

    def __init__(self, max_age_hours: float = None):
        self._docs: Dict[str, Dict] = {}
        self._lock = threading.Lock()
        self.max_age_hours = config.purge_after_hours if max_age_hours is None else max_age_hours

    def register(self, path: str, filename: str = "") -> str:
        """Open the PDF at `path` and return its document id."""
        self.expire()
        view = open_document(path)
        doc_id = str(uuid.uuid4())
        with self._lock:
            self._docs[doc_id] = {
                "document_id": doc_id,
                "filename": filename or os.path.basename(path),
                "path": path,
                "view": view,
                "created_at": time.time(),
            }
        logger.info("Registered %s as %s (%d pages)", filename or path, doc_id, view.num_pages)
        return doc_id

    def get(self, doc_id: str) -> Dict:
        with self._lock:
            entry = self._docs.get(doc_id)
        if entry is None:
            raise NotFoundError("Document not found")
        return entry

    def view(self, doc_id: str) -> DocumentView:
        return self.get(doc_id)["view"]

    def describe(self, doc_id: str) -> Dict:
        entry = self.get(doc_id)
        return {
            "document_id": doc_id,
            "filename": entry["filename"],
            **entry["view"].to_dict(),
        }

    def remove(self, doc_id: str, delete_file: bool = True) -> None:
        with self._lock:
            entry = self._docs.pop(doc_id, None)
        if entry is None:
            raise NotFoundError("Document not found")
        self._discard(entry, delete_file)

    def expire(self, now: float = None) -> List[str]:
        """Drop documents registered more than `max_age_hours` ago; returns their ids."""
        cutoff = (time.time() if now is None else now) - self.max_age_hours * 3600
        with self._lock:
            stale = [doc_id for doc_id, entry in self._docs.items() if entry["created_at"] < cutoff]
            entries = [self._docs.pop(doc_id) for doc_id in stale]
        for entry in entries:
            self._discard(entry, delete_file=True)
        if stale:
            logger.info("Expired %d document(s)", len(stale))
        return stale

    @staticmethod
    def _discard(entry: Dict, delete_file: bool) -> None:
        entry["view"].close()
        if delete_file:
            try:
                os.remove(entry["path"])
            except OSError:
                logger.debug("Upload %s already gone", entry["path"])

    def __len__(self):
        with self._lock:
            return len(self._docs)


def purge_old_files(folder: str, hours: int = 12) -> int:
    """Delete files in <folder> older than <hours>. Returns how many were removed."""
    if not os.path.isdir(folder):
        return 0
    cutoff = datetime.utcnow() - timedelta(hours=hours)
    removed = 0
    for fname in os.listdir(folder):
        path = os.path.join(folder, fname)
        if os.path.isfile(path) and datetime.utcfromtimestamp(os.path.getmtime(path)) < cutoff:
            try:
                os.remove(path)
                removed += 1
            except OSError:
                pass
    return removed
