from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("pdf-invoice-extractor", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Gemini
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL")

    # Groq (OpenAI-compatible endpoint)
    groq_api_key: str | None = Field(default=None, alias="GROQ_API_KEY")
    groq_model: str = Field("llama-3.1-8b-instant", alias="GROQ_MODEL")
    groq_base_url: str = Field("https://api.groq.com/openai/v1", alias="GROQ_BASE_URL")

    # Upstream timeouts (seconds)
    model_timeout_seconds: float = Field(60.0, alias="MODEL_TIMEOUT_SECONDS")
    document_fetch_timeout_seconds: float = Field(30.0, alias="DOCUMENT_FETCH_TIMEOUT_SECONDS")

    # Uploads
    max_upload_bytes: int = Field(25 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    blob_storage_dir: str = Field("uploads", alias="BLOB_STORAGE_DIR")

    # Invoice persistence ("sqlite" or "memory")
    invoice_store_backend: str = Field("sqlite", alias="INVOICE_STORE_BACKEND")
    invoice_db_path: str = Field("invoices.db", alias="INVOICE_DB_PATH")

    # API Base URL (used to build document references returned by /upload)
    api_base_url: str = Field("http://127.0.0.1:8000", alias="API_BASE_URL")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "populate_by_name": True}

settings = Settings()
