import logging
from fastapi import APIRouter, Depends, HTTPException, status, Form, File, UploadFile
from fastapi.responses import RedirectResponse, Response
from app.core.config import settings
from app.schemas.page import (
    AttachmentUpload,
    EditPageResponse,
    PageInput,
    PageDraft,
    PageListItem,
    PageRecord,
    RenderedPageResponse,
    validate_page_input,
)
from app.services.render_service import kebab_to_normal_case, render_markdown, to_kebab_case
from app.services.wiki_service import Wiki, WikiResult, get_wiki
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

HOME_PAGE_NAME = settings.HOME_PAGE_NAME


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _rendered(page: PageRecord) -> RenderedPageResponse:
    return RenderedPageResponse(
        **page.model_dump(),
        title=kebab_to_normal_case(page.name),
        html=render_markdown(page.content),
    )


def _read(result: WikiResult, what: str) -> WikiResult:
    # erreur de stockage: 500, jamais "absent"
    if not result.ok:
        logger.error("Problem in reading %s: %s", what, result.error)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Problem in reading {what}")
    return result


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid id '{value}'")


# Page d'accueil
@router.get("/", response_model=RenderedPageResponse)
def home(wiki: Wiki = Depends(get_wiki)):
    page = _read(wiki.get_page(HOME_PAGE_NAME), "page").page
    if page is None:
        return _redirect(f"/{HOME_PAGE_NAME}")
    return _rendered(page)

@router.get("/pages", response_model=List[PageListItem])
def list_pages(wiki: Wiki = Depends(get_wiki)):
    return [
        PageListItem(id=p.id, name=p.name, title=kebab_to_normal_case(p.name), last_modified_utc=p.last_modified_utc)
        for p in wiki.list_all_pages()
    ]

@router.get("/new-page")
def new_page(pageName: Optional[str] = None):
    if not pageName or not pageName.strip():
        return _redirect("/")
    return _redirect(f"/{to_kebab_case(pageName)}")

@router.get("/edit", response_model=EditPageResponse)
def edit_page(pageName: str, wiki: Wiki = Depends(get_wiki)):
    page = _read(wiki.get_page(pageName), "page").page
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    # pas de bouton supprimer sur la home page
    return EditPageResponse(**page.model_dump(), can_delete=page.name != HOME_PAGE_NAME)

@router.get("/attachment")
def download_attachment(fileId: str, wiki: Wiki = Depends(get_wiki)):
    found = _read(wiki.get_file(fileId), "file").file
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    meta, data = found
    logger.info("Attachment %s - %s", meta.id, meta.filename)
    return Response(content=data, media_type=meta.mime_type)

@router.post("/delete-page")
def delete_page(id: Optional[str] = Form(None, alias="Id"), wiki: Wiki = Depends(get_wiki)):
    page_id = _to_int(id)
    if page_id is None:
        logger.warning("Unable to delete page because form Id is missing")
        return _redirect("/")

    result = wiki.delete_page(page_id, HOME_PAGE_NAME)
    if not result.ok and result.error is not None:
        logger.error("Error in deleting page id %s: %s", page_id, result.error)
    elif not result.ok:
        logger.error("Unable to delete page id %s (%s)", page_id, result.reason.value)

    return _redirect("/")

@router.post("/delete-attachment")
def delete_attachment(
    id: Optional[str] = Form(None, alias="Id"),
    page_id: Optional[str] = Form(None, alias="PageId"),
    wiki: Wiki = Depends(get_wiki),
):
    if not id or not id.strip():
        logger.warning("Unable to delete attachment because form Id is missing")
        return _redirect("/")

    pid = _to_int(page_id)
    if pid is None:
        logger.warning("Unable to delete attachment because form PageId is missing")
        return _redirect("/")

    result = wiki.delete_attachment(pid, id)
    if result.ok:
        return _redirect(f"/{result.page.name}")

    if result.error is not None:
        logger.error("Error in deleting page attachment id %s: %s", id, result.error)
    else:
        logger.error("Unable to delete page attachment id %s (%s)", id, result.reason.value)

    return _redirect(f"/{result.page.name}" if result.page is not None else "/")

# Affiche une page, ou un brouillon vide pour l'éditeur si elle n'existe pas
@router.get("/{pageName}", response_model=Union[RenderedPageResponse, PageDraft])
def read_page(pageName: str, wiki: Wiki = Depends(get_wiki)):
    page = _read(wiki.get_page(pageName), "page").page
    if page is None:
        return PageDraft(name=pageName)
    return _rendered(page)

# Crée ou met à jour une page
@router.post("/{pageName}")
def save_page(
    pageName: str,
    name: str = Form("", alias="Name"),
    content: str = Form("", alias="Content"),
    id: Optional[str] = Form(None, alias="Id"),
    attachment: Optional[UploadFile] = File(None, alias="Attachment"),
    wiki: Wiki = Depends(get_wiki),
):
    upload = None
    if attachment is not None and attachment.filename:
        upload = AttachmentUpload(
            file_name=attachment.filename,
            content_type=attachment.content_type or "application/octet-stream",
            data=attachment.file.read(),
        )

    page_input = PageInput(id=_to_int(id), name=name, content=content, attachment=upload)

    errors = validate_page_input(page_input, pageName, HOME_PAGE_NAME)
    if errors:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=errors)

    result = wiki.save_page(page_input)
    if result.ok:
        return _redirect(f"/{result.page.name}")

    logger.error("Problem in saving page: %s", result.error)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Problem in saving page")
