from pydantic_settings import BaseSettings
from functools import lru_cache
from pathlib import Path


class Settings(BaseSettings):
    # App
    APP_NAME: str = "DotBlog API"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = """
    Content management API for a blog.

    ## Features
    * Topic composition, publishing and trash management
    * Category and tag management
    * Archive queries by category, tag and month
    * Related topics and month statistics
    * Admin topic editor
    """
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"
    OPENAPI_URL: str = "/openapi.json"
    OPENAPI_TAGS: list[dict] = [
        {
            "name": "topics",
            "description": "Topic creation, editing, publishing and archive queries"
        },
        {
            "name": "tags",
            "description": "Tag listing, renaming and deletion"
        },
        {
            "name": "categories",
            "description": "Category listing and management"
        },
        {
            "name": "admin",
            "description": "Topic editor and cache management",
        }
    ]
    CONTACT: dict = {"name": "dotblog"}
    LICENSE_INFO: dict = {
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
        "identifier": "MIT",
    }

    # CORS
    CORS_ALLOWED_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost"]

    # Database
    DB_USER: str = "blog"
    DB_PASS: str = "blog"
    DB_NAME: str = "blog"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_ECHO: bool = False
    DATABASE_URL_OVERRIDE: str | None = None

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.DB_USER}:{self.DB_PASS}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Cache
    CACHE_KEY_PREFIX: str = "blog"
    CACHE_EXPIRE_TIME: int = 300  # 5 minutes
    LOOKUP_CACHE_EXPIRE_TIME: int = 3600

    # Content
    DEFAULT_AUTHOR_ID: int = 1
    RELATED_TOPIC_COUNT: int = 10
    MAX_PAGE_SIZE: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # console | json

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    # Project root holds the .env file
    root_dir = Path(__file__).resolve().parent.parent

    return Settings(_env_file=root_dir / ".env")
