"""
Bulk export and import of the whole data set as one JSON document.

The document carries ``cards``, ``progress``, ``sessions``, ``categories``,
``settings`` and an ``exportDate`` timestamp.
"""

import logging
from datetime import datetime

from pydantic import ValidationError

from recallkit.domain.errors import StorageError
from recallkit.domain.models import ExportDocument
from recallkit.domain.ports import StorageRepository

from .utils.dates import utc_now

logger = logging.getLogger(__name__)

COLLECTIONS = ("cards", "progress", "sessions", "categories", "settings")


class BackupService:
    def __init__(self, repo: StorageRepository):
        self._repo = repo

    def build_document(self, now: datetime | None = None) -> ExportDocument:
        return ExportDocument(
            cards=self._repo.load_all_cards(),
            progress=self._repo.load_progress(),
            sessions=self._repo.load_sessions(),
            categories=self._repo.load_categories(),
            settings=self._repo.load_settings(),
            export_date=now or utc_now(),
        )

    def export_data(self, now: datetime | None = None) -> str:
        document = self.build_document(now)
        logger.info(f"Exporting {len(document.cards or [])} cards")
        return document.model_dump_json(by_alias=True, indent=2)

    def import_data(self, json_data: str | bytes) -> bool:
        """
        Replace stored collections with the ones in ``json_data``.

        The whole document is validated before anything is written. Each
        collection present in the document replaces the stored one; missing
        collections are left as they are.

        Returns:
            True on success, False if the document is malformed or a write failed.
        """
        try:
            document = ExportDocument.model_validate_json(json_data)
        except ValidationError as e:
            logger.warning(f"Rejected import: {e.error_count()} validation error(s)")
            return False

        present = [
            name
            for name in COLLECTIONS
            if name in document.model_fields_set and getattr(document, name) is not None
        ]

        try:
            if "cards" in present:
                self._repo.save_all_cards(document.cards)
            if "progress" in present:
                self._repo.save_progress(document.progress)
            if "sessions" in present:
                self._repo.save_sessions(document.sessions)
            if "categories" in present:
                self._repo.save_categories(document.categories)
            if "settings" in present:
                self._repo.save_settings(document.settings)
        except StorageError as e:
            logger.error(f"Import failed while writing: {e}")
            return False

        logger.info(f"Imported collections: {', '.join(present) or 'none'}")
        return True

    def clear_all(self) -> None:
        self._repo.clear_all()
        logger.info("Cleared all stored data")
