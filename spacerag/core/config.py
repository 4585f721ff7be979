from pydantic_settings import BaseSettings
from pydantic import ConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "Space RAG"
    ENVIRONMENT: str = "Dev"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    # Persistence for chunk store + space registry
    STORE_DIR: str = "data/processed"

    # Retrieval
    CHUNK_SIZE: int = 1000
    CHUNK_OVERLAP: int = 200
    TOP_K: int = 3
    SAMPLE_QUESTION_COUNT: int = 3
    MAX_CORPUS_CHARS: int = 12000
    INDEX_BACKEND: str = "numpy"

    # Providers
    EMBEDDING_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"
    LLM_API_URL: str = "https://api.llama-api.com/chat/completions"
    LLM_API_KEY: str = ""
    LLM_MODEL: str = "llama3.2-3b"
    LLM_TIMEOUT: float = 60.0
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 512

    # Use Pydantic v2 style config and ignore unexpected env vars
    model_config = ConfigDict(env_file=".env", extra="ignore")


settings = Settings()
