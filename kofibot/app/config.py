#!/usr/bin/env python3
"""
Configuration management for the Kofi SMS assistant.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

PACKAGE_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

DEFAULT_EMBEDDING_API_URL = "https://router.huggingface.co/hf-inference/models/{model}/pipeline/feature-extraction"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


def str_to_bool(v) -> bool:
    return str(v).lower() in {"1", "true", "yes", "y", "on"} if v is not None else False


class Config:
    """Configuration class for the application."""

    # Embedding service (Hugging Face inference API)
    HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY")
    EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "intfloat/multilingual-e5-large")
    EMBEDDING_API_URL = os.getenv(
        "EMBEDDING_API_URL",
        DEFAULT_EMBEDDING_API_URL.format(model=EMBEDDING_MODEL),
    )
    EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", 1024))
    EMBEDDING_TIMEOUT_SECONDS = float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", 30))
    EMBEDDING_MAX_ATTEMPTS = int(os.getenv("EMBEDDING_MAX_ATTEMPTS", 3))
    EMBEDDING_RETRY_DELAY_SECONDS = float(os.getenv("EMBEDDING_RETRY_DELAY_SECONDS", 2.0))
    EMBEDDING_BACKOFF_FACTOR = float(os.getenv("EMBEDDING_BACKOFF_FACTOR", 1.0))

    # Vector index
    PINECONE_API_KEY = os.getenv("PINECONE_API_KEY")
    VECTOR_BACKEND = os.getenv("VECTOR_BACKEND", "pinecone" if PINECONE_API_KEY else "faiss").lower()
    PINECONE_INDEX = os.getenv("PINECONE_INDEX", "kofi")
    PINECONE_NAMESPACE = os.getenv("PINECONE_NAMESPACE", "business_info1")
    PINECONE_CLOUD = os.getenv("PINECONE_CLOUD", "aws")
    PINECONE_REGION = os.getenv("PINECONE_REGION", "us-east-1")
    RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", 3))

    # Gemini (Google) generation
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)
    GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", 0.5))
    GENERATION_MAX_OUTPUT_TOKENS = int(os.getenv("GENERATION_MAX_OUTPUT_TOKENS", 300))
    GENERATION_TIMEOUT_SECONDS = float(os.getenv("GENERATION_TIMEOUT_SECONDS", 60))
    MAX_HISTORY_TURNS = int(os.getenv("MAX_HISTORY_TURNS", 6))
    REPLY_STYLE_INSTRUCTION = os.getenv(
        "REPLY_STYLE_INSTRUCTION", "reply to the messages you get in 100 characters"
    )

    # Commerce
    RESERVATION_CAPACITY = int(os.getenv("RESERVATION_CAPACITY", 50))

    # Knowledge base
    KNOWLEDGE_FILE = os.getenv(
        "KNOWLEDGE_FILE", os.path.join(PACKAGE_ROOT, "data", "raw", "business_info.txt")
    )
    INGEST_ON_STARTUP = str_to_bool(os.getenv("INGEST_ON_STARTUP", "true"))

    # Application Configuration
    REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", 20))

    @classmethod
    def debug_print(cls):
        print(f"[CONFIG] VECTOR_BACKEND={cls.VECTOR_BACKEND} index={cls.PINECONE_INDEX} namespace={cls.PINECONE_NAMESPACE}")
        print(f"[CONFIG] EMBEDDING_MODEL={cls.EMBEDDING_MODEL} dim={cls.EMBEDDING_DIMENSION} set={bool(cls.HUGGINGFACE_API_KEY)}")
        print(f"[CONFIG] GEMINI_MODEL={cls.GEMINI_MODEL} set={bool(cls.GEMINI_API_KEY)}")

    @classmethod
    def validate(cls):
        """Validate that numeric configuration is usable."""
        invalid = []

        if not 1 <= cls.EMBEDDING_MAX_ATTEMPTS <= 10:
            invalid.append("EMBEDDING_MAX_ATTEMPTS")
        if cls.EMBEDDING_RETRY_DELAY_SECONDS < 0:
            invalid.append("EMBEDDING_RETRY_DELAY_SECONDS")
        if cls.EMBEDDING_BACKOFF_FACTOR < 1:
            invalid.append("EMBEDDING_BACKOFF_FACTOR")
        if cls.EMBEDDING_DIMENSION < 1:
            invalid.append("EMBEDDING_DIMENSION")
        if cls.RETRIEVAL_TOP_K < 1:
            invalid.append("RETRIEVAL_TOP_K")
        if cls.GENERATION_MAX_OUTPUT_TOKENS < 1:
            invalid.append("GENERATION_MAX_OUTPUT_TOKENS")
        if cls.MAX_HISTORY_TURNS < 1:
            invalid.append("MAX_HISTORY_TURNS")
        if cls.RESERVATION_CAPACITY < 1:
            invalid.append("RESERVATION_CAPACITY")
        if cls.VECTOR_BACKEND not in ("pinecone", "faiss"):
            invalid.append("VECTOR_BACKEND")

        if invalid:
            raise ValueError(f"Invalid configuration: {', '.join(invalid)}")

        return True

# Validate configuration on import
Config.validate()
