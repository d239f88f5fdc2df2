from dataclasses import dataclass
import os
from typing import Optional

from dotenv import load_dotenv


@dataclass
class NotesConfig:
    host: str = "0.0.0.0"
    port: int = 5000
    app_env: str = "production"
    cors_origin: str = "http://localhost:3000"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    embedding_backend: str = "sentence-transformers"
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    ollama_base_url: str = "http://localhost:11434"
    vector_dimension: int = 1536

    vector_store_backend: str = "pinecone"
    pinecone_api_key: Optional[str] = None
    pinecone_index_name: str = "portfolio-free"
    chroma_persist_directory: str = "./chroma_db"
    chroma_collection: str = "notes"

    llm_api_key: Optional[str] = None
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.1-8b-instant"
    llm_max_retries: int = 0

    assistant_owner: str = "the note owner"
    search_top_k: int = 3

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "NotesConfig":
        load_dotenv(dotenv_path)

        def _int(name: str, default: int) -> int:
            value = os.environ.get(name)
            return int(value) if value else default

        def _opt(*names: str) -> Optional[str]:
            for name in names:
                value = os.environ.get(name)
                if value:
                    return value
            return None

        return cls(
            host=os.environ.get("HOST", cls.host),
            port=_int("PORT", cls.port),
            app_env=os.environ.get("APP_ENV", cls.app_env),
            cors_origin=os.environ.get("CORS_ORIGIN", cls.cors_origin),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level),
            log_file=_opt("LOG_FILE"),
            embedding_backend=os.environ.get("EMBEDDING_BACKEND", cls.embedding_backend),
            embedding_model=os.environ.get("EMBEDDING_MODEL", cls.embedding_model),
            ollama_base_url=os.environ.get("OLLAMA_BASE_URL", cls.ollama_base_url),
            vector_dimension=_int("VECTOR_DIMENSION", cls.vector_dimension),
            vector_store_backend=os.environ.get("VECTOR_STORE_BACKEND", cls.vector_store_backend),
            pinecone_api_key=_opt("PINECONE_API_KEY"),
            pinecone_index_name=os.environ.get("PINECONE_INDEX_NAME", cls.pinecone_index_name),
            chroma_persist_directory=os.environ.get(
                "CHROMA_PERSIST_DIRECTORY", cls.chroma_persist_directory
            ),
            chroma_collection=os.environ.get("CHROMA_COLLECTION", cls.chroma_collection),
            llm_api_key=_opt("LLM_API_KEY", "GROQ_API_KEY"),
            llm_base_url=os.environ.get("LLM_BASE_URL", cls.llm_base_url),
            llm_model=os.environ.get("LLM_MODEL", cls.llm_model),
            llm_max_retries=_int("LLM_MAX_RETRIES", cls.llm_max_retries),
            assistant_owner=os.environ.get("ASSISTANT_OWNER", cls.assistant_owner),
            search_top_k=_int("SEARCH_TOP_K", cls.search_top_k),
        )
