"""
Wiki store: pages, pièces jointes et blobs.

Chaque opération ouvre sa propre session et la referme en sortie (succès ou
erreur). Il n'y a pas d'atomicité entre deux appels: "la page existe ?" puis
"crée la page" peuvent se croiser entre deux requêtes concurrentes.

Les pages renvoyées sont des PageRecord (copies), jamais des objets ORM liés
à une session.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy import func, text
from sqlalchemy.orm import Session

from app.core.cache import MemoryCache
from app.core.config import settings
from app.core.database import SessionLocal
from app.models.file import StoredFile
from app.models.page import Attachment, Page
from app.schemas.page import FileInfo, PageInput, PageRecord
from app.services.render_service import normalize_page_name

logger = logging.getLogger(__name__)

ALL_PAGES_KEY = "AllPages"


class FailureReason(str, Enum):
    PAGE_NOT_FOUND = "page_not_found"
    HOME_PAGE_PROTECTED = "home_page_protected"
    PAGE_NOT_DELETED = "page_not_deleted"
    FILE_NOT_DELETED = "file_not_deleted"
    ATTACHMENT_LIST_NOT_UPDATED = "attachment_list_not_updated"
    STORAGE_ERROR = "storage_error"


@dataclass
class WikiResult:
    """Résultat d'une opération du store (jamais d'exception vers l'appelant).

    Pour une lecture, ok=True avec page/file à None veut dire "absent".
    """
    ok: bool
    page: Optional[PageRecord] = None
    file: Optional[Tuple[FileInfo, bytes]] = None
    error: Optional[Exception] = None
    reason: Optional[FailureReason] = None

    @classmethod
    def success(cls, page: Optional[PageRecord] = None,
                file: Optional[Tuple[FileInfo, bytes]] = None) -> "WikiResult":
        return cls(ok=True, page=page, file=file)

    @classmethod
    def failure(cls, reason: FailureReason, page: Optional[PageRecord] = None,
                error: Optional[Exception] = None) -> "WikiResult":
        return cls(ok=False, page=page, error=error, reason=reason)


def _timestamp() -> datetime:
    return datetime.utcnow()


def _record(page: Page) -> PageRecord:
    return PageRecord.model_validate(page)


class Wiki:
    def __init__(self, session_factory=SessionLocal, cache=None,
                 cache_ttl: timedelta = timedelta(minutes=settings.CACHE_ALL_PAGES_MINUTES)):
        self._session_factory = session_factory
        self._cache = cache if cache is not None else MemoryCache()
        self._cache_ttl = cache_ttl

    def _invalidate(self) -> None:
        self._cache.remove(ALL_PAGES_KEY)

    def ping(self) -> None:
        with self._session_factory() as db:
            db.execute(text("SELECT 1"))

    # Liste des pages, en cache pendant CACHE_ALL_PAGES_MINUTES
    def list_all_pages(self) -> List[PageRecord]:
        """All pages ordered by name. An empty list on storage errors (not cached)."""
        pages = self._cache.get(ALL_PAGES_KEY)
        if pages is not None:
            return pages

        try:
            with self._session_factory() as db:
                pages = [_record(p) for p in db.query(Page).order_by(Page.name, Page.id).all()]
        except Exception:
            logger.exception("There is an exception in trying to list all pages")
            return []

        self._cache.set(ALL_PAGES_KEY, pages, self._cache_ttl)
        return pages

    def get_page(self, name: str) -> WikiResult:
        """Case-insensitive exact match on the page name, never cached.

        ``result.page`` is None when no page has this name.
        """
        try:
            with self._session_factory() as db:
                page = db.query(Page).filter(func.lower(Page.name) == name.lower()).first()
                return WikiResult.success(_record(page) if page is not None else None)
        except Exception as ex:
            logger.exception("There is an exception in trying to get page name '%s'", name)
            return WikiResult.failure(FailureReason.STORAGE_ERROR, error=ex)

    def save_page(self, input: PageInput) -> WikiResult:
        """Insert a new page, or update the page ``input.id`` in place.

        The name is normalized and stripped of markup; the content is kept as
        typed. An uploaded file is written to the blob store and appended to
        the page attachments (older attachments are kept).
        """
        try:
            with self._session_factory() as db:
                existing_page = db.get(Page, input.id) if input.id is not None else None

                page = existing_page if existing_page is not None else Page(attachments=[])
                page.name = normalize_page_name(input.name)
                # pas de nettoyage ici: on le fait au rendu
                page.content = input.content
                page.last_modified_utc = _timestamp()

                upload = input.attachment
                if upload is not None and upload.file_name.strip():
                    page.attachments.append(
                        self._upload(db, upload.file_name, upload.content_type, upload.data))

                if existing_page is None:
                    db.add(page)
                db.commit()
                saved = _record(page)

            self._invalidate()
            return WikiResult.success(saved)
        except Exception as ex:
            logger.exception("There is an exception in trying to save page name '%s'", input.name)
            return WikiResult.failure(FailureReason.STORAGE_ERROR, error=ex)

    def _upload(self, db: Session, file_name: str, content_type: Optional[str], data: bytes) -> Attachment:
        file_id = str(uuid.uuid4())
        mime_type = content_type or "application/octet-stream"
        now = _timestamp()
        db.add(StoredFile(
            id=file_id,
            filename=file_name,
            mime_type=mime_type,
            length=len(data),
            uploaded_at=now,
            data=data,
        ))
        return Attachment(file_id=file_id, file_name=file_name, mime_type=mime_type, last_modified_utc=now)

    def delete_attachment(self, page_id: int, file_id: str) -> WikiResult:
        try:
            with self._session_factory() as db:
                page = db.get(Page, page_id)
                if page is None:
                    logger.warning(
                        "Delete attachment operation fails because page id %s cannot be found in the database",
                        page_id)
                    return WikiResult.failure(FailureReason.PAGE_NOT_FOUND)
                before = _record(page)

                # le fichier doit appartenir à cette page
                owned = [a for a in page.attachments if a.file_id.lower() == file_id.lower()]
                if not owned:
                    logger.warning("File attachment id %s does not belong to page id %s", file_id, page_id)
                    return WikiResult.failure(FailureReason.FILE_NOT_DELETED, page=before)

                deleted = db.query(StoredFile).filter(
                    StoredFile.id.in_([a.file_id for a in owned])
                ).delete(synchronize_session=False)
                if not deleted:
                    logger.warning("We cannot delete this file attachment id %s and it's a mystery why", file_id)
                    return WikiResult.failure(FailureReason.FILE_NOT_DELETED, page=before)

                for attachment in owned:
                    page.attachments.remove(attachment)

                try:
                    db.commit()
                except Exception as ex:
                    logger.warning(
                        "Delete attachment works but updating the page (id %s) attachment list fails", page_id)
                    return WikiResult.failure(FailureReason.ATTACHMENT_LIST_NOT_UPDATED, page=before, error=ex)
                updated = _record(page)

            self._invalidate()
            return WikiResult.success(updated)
        except Exception as ex:
            logger.exception("Error in deleting attachment %s of page id %s", file_id, page_id)
            return WikiResult.failure(FailureReason.STORAGE_ERROR, error=ex)

    def delete_page(self, page_id: int, home_page_name: str) -> WikiResult:
        try:
            with self._session_factory() as db:
                page = db.get(Page, page_id)
                if page is None:
                    logger.warning("Delete operation fails because page id %s cannot be found in the database", page_id)
                    return WikiResult.failure(FailureReason.PAGE_NOT_FOUND)
                deleted_page = _record(page)

                if page.name.lower() == home_page_name.lower():
                    logger.warning("Page id %s is a home page and delete operation on home page is not allowed", page_id)
                    return WikiResult.failure(FailureReason.HOME_PAGE_PROTECTED, page=deleted_page)

                # blobs d'abord, au mieux: un blob manquant ne bloque pas la suppression
                for attachment in deleted_page.attachments:
                    removed = db.query(StoredFile).filter(
                        StoredFile.id == attachment.file_id
                    ).delete(synchronize_session=False)
                    if not removed:
                        logger.warning("Attachment blob %s of page id %s could not be deleted and is orphaned",
                                       attachment.file_id, page_id)

                db.query(Attachment).filter(Attachment.page_id == page_id).delete(synchronize_session=False)
                deleted = db.query(Page).filter(Page.id == page_id).delete(synchronize_session=False)
                if not deleted:
                    logger.warning("Somehow we cannot delete page id %s and it's a mystery why.", page_id)
                    return WikiResult.failure(FailureReason.PAGE_NOT_DELETED, page=deleted_page)

                db.commit()

            self._invalidate()
            return WikiResult.success(deleted_page)
        except Exception as ex:
            logger.exception("Error in deleting page id %s", page_id)
            return WikiResult.failure(FailureReason.STORAGE_ERROR, error=ex)

    # result.file à None si le fichier n'existe pas
    def get_file(self, file_id: str) -> WikiResult:
        try:
            with self._session_factory() as db:
                stored = db.get(StoredFile, file_id)
                if stored is None:
                    return WikiResult.success()
                return WikiResult.success(file=(FileInfo.model_validate(stored), bytes(stored.data)))
        except Exception as ex:
            logger.exception("There is an exception in trying to get file id %s", file_id)
            return WikiResult.failure(FailureReason.STORAGE_ERROR, error=ex)


wiki = Wiki()

def get_wiki() -> Wiki:
    """Dépendance FastAPI: le store partagé du process"""
    return wiki
