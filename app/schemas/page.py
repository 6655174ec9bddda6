from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Dict, List, Optional

from app.services.render_service import normalize_page_name

# Schemas pour les pages

class AttachmentUpload(BaseModel):
    """Fichier envoyé avec le formulaire (nom et type non vérifiés)"""
    file_name: str
    content_type: str = "application/octet-stream"
    data: bytes = b""

class PageInput(BaseModel):
    id: Optional[int] = None
    name: str = ""
    content: str = ""
    attachment: Optional[AttachmentUpload] = None

class AttachmentRecord(BaseModel):
    file_id: str
    file_name: str
    mime_type: str
    last_modified_utc: datetime

    model_config = ConfigDict(from_attributes=True)

class PageRecord(BaseModel):
    id: int
    name: str
    content: str
    last_modified_utc: datetime
    attachments: List[AttachmentRecord] = []

    model_config = ConfigDict(from_attributes=True)

class RenderedPageResponse(PageRecord):
    title: str
    html: str
    editor: bool = False

class PageDraft(BaseModel):
    """Page absente: brouillon vide pour ouvrir l'éditeur"""
    id: Optional[int] = None
    name: str
    content: str = ""
    attachments: List[AttachmentRecord] = []
    can_delete: bool = False
    editor: bool = True

class EditPageResponse(PageRecord):
    can_delete: bool

class PageListItem(BaseModel):
    id: int
    name: str
    title: str
    last_modified_utc: datetime

class FileInfo(BaseModel):
    """Métadonnées d'un blob"""
    id: str
    filename: str
    mime_type: str
    length: int
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


def validate_page_input(input: PageInput, page_name: str, home_page_name: str) -> Dict[str, List[str]]:
    """Check a submitted page before anything touches the store.

    Returns the error messages per field, empty when the input is valid.
    """
    errors: Dict[str, List[str]] = {}

    if not input.name or not input.name.strip():
        errors.setdefault("Name", []).append("Name is required")
    elif not normalize_page_name(input.name).strip("-"):
        # que du balisage: plus rien après nettoyage
        errors.setdefault("Name", []).append("Name must contain text")
    # on ne renomme pas la home page
    if page_name.lower() == home_page_name.lower() and input.name != home_page_name:
        errors.setdefault("Name", []).append(
            f"You cannot modify home page name. Please keep it {home_page_name}"
        )

    if not input.content or not input.content.strip():
        errors.setdefault("Content", []).append("Content is required")

    return errors
