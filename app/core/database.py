from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings

DATABASE_URL = settings.DATABASE_URL


def make_engine(url: str):
    # sqlite: une connexion peut passer d'un thread de requête à l'autre
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, connect_args=connect_args)


def make_session_factory(bind):
    # expire_on_commit=False: les pages restent lisibles après fermeture de la session
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)
Base = declarative_base()
