import os
from dotenv import load_dotenv
from typing import Dict, Any, Optional

# Load environment variables from .env file
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


class Config:
    """Central configuration management for the schema intelligence pipeline."""

    # Content extraction thresholds
    MIN_MAIN_CONTENT_LENGTH: int = int(os.getenv("MIN_MAIN_CONTENT_LENGTH", "500"))
    THIN_CONTENT_LENGTH: int = int(os.getenv("THIN_CONTENT_LENGTH", "100"))
    DEFAULT_LANGUAGE: str = os.getenv("DEFAULT_LANGUAGE", "en-US")

    # Entity and schema limits
    MAX_ENTITIES: int = int(os.getenv("MAX_ENTITIES", "25"))
    MAX_MENTIONS: int = int(os.getenv("MAX_MENTIONS", "10"))
    MAX_LEARNING_OUTCOMES: int = int(os.getenv("MAX_LEARNING_OUTCOMES", "5"))

    # HowTo detection
    MIN_HOWTO_INDICATORS: int = int(os.getenv("MIN_HOWTO_INDICATORS", "2"))
    MAX_HOWTO_STEPS: int = int(os.getenv("MAX_HOWTO_STEPS", "15"))

    # Embeddings and randomized routines
    EMBEDDING_DIMENSION: int = int(os.getenv("EMBEDDING_DIMENSION", "768"))
    RANDOM_SEED: Optional[int] = _optional_int("RANDOM_SEED")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Return configuration as a dictionary for logging/debugging."""
        return {
            "MIN_MAIN_CONTENT_LENGTH": cls.MIN_MAIN_CONTENT_LENGTH,
            "THIN_CONTENT_LENGTH": cls.THIN_CONTENT_LENGTH,
            "DEFAULT_LANGUAGE": cls.DEFAULT_LANGUAGE,
            "MAX_ENTITIES": cls.MAX_ENTITIES,
            "MAX_MENTIONS": cls.MAX_MENTIONS,
            "MAX_LEARNING_OUTCOMES": cls.MAX_LEARNING_OUTCOMES,
            "MIN_HOWTO_INDICATORS": cls.MIN_HOWTO_INDICATORS,
            "MAX_HOWTO_STEPS": cls.MAX_HOWTO_STEPS,
            "EMBEDDING_DIMENSION": cls.EMBEDDING_DIMENSION,
            "RANDOM_SEED": cls.RANDOM_SEED,
            "LOG_LEVEL": cls.LOG_LEVEL
        }

# Initialize on import
config = Config()
