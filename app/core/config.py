from os import getenv

class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "sqlite:///./wiki.db")
    HOME_PAGE_NAME = getenv("HOME_PAGE_NAME", "home-page")
    CACHE_ALL_PAGES_MINUTES = float(getenv("CACHE_ALL_PAGES_MINUTES", "30"))  # liste des pages en cache 30 minutes
    LOG_LEVEL = getenv("LOG_LEVEL", "WARNING")

settings = Settings()
