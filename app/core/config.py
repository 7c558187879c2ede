from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "DocSearch API"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    DATA_DIR: str = "./data"

    # Upload config
    MAX_UPLOAD_MB: int = 25
    MAX_FILES_PER_REQUEST: int = 10
    ALLOWED_EXTENSIONS: tuple[str, ...] = (
        ".txt",
        ".pdf",
        ".doc",
        ".docx",
        ".xlsx",
        ".pptx",
    )

    # Extraction
    MAX_PDF_PAGES: int = 500
    LINES_PER_PAGE: int = 25

    # Matching
    PHRASE_MATCH_RATIO: float = 0.7
    FUZZY_MAX_DISTANCE: int = 2
    MAX_MATCHES_PER_FILE: int = 20
    CONTEXT_CHARS: int = 50
    HIGHLIGHT_OPEN_TAG: str = '<mark class="bg-yellow-200 dark:bg-yellow-800 px-1 rounded">'
    HIGHLIGHT_CLOSE_TAG: str = "</mark>"

    MAX_QUERY_CHARS: int = 500

    # /debug
    PREVIEW_CHARS: int = 200


settings = Settings()
