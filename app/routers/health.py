import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from app.services.wiki_service import Wiki, get_wiki

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

@router.get("/z")
def healthz():
    return {"status": "ok"}

@router.get("/ready")
def readyz(wiki: Wiki = Depends(get_wiki)):
    # la base sqlite répond ?
    try:
        wiki.ping()
    except Exception as e:
        logger.warning("Store not ready: %s", e)
        return JSONResponse({"ready": False}, status_code=503)
    return {"ready": True}
