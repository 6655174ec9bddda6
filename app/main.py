import logging
from fastapi import FastAPI
from app.core.config import settings
from app.core.database import engine, Base
from app.models import page, file  # noqa: F401  (tables)
from app.routers import health, pages

logging.basicConfig(level=settings.LOG_LEVEL)

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Markdown Wiki",
    version="0.1.0"
)

# Routes (pages en dernier: "/{pageName}" attrape tout)
app.include_router(health.router, prefix="/health")
app.include_router(pages.router)
