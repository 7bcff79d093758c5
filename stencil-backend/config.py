"""
Configuration settings for the stencil backend
"""
import os
from pathlib import Path
from dotenv import load_dotenv

from stencil import codec, pipeline, styles

# Load environment variables from .env file
env_path = Path(__file__).parent / '.env'
if env_path.exists():
    load_dotenv(env_path)
    print(f"[CONFIG] Loaded environment from {env_path}")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


# Environment mode
PRODUCTION = os.getenv('PRODUCTION', 'false').lower() == 'true'

# Server configuration
HOST = os.getenv('STENCIL_HOST', "127.0.0.1")
PORT = _env_int('STENCIL_PORT', 5000)

# CORS allowed origins (add your frontend URLs)
ALLOWED_ORIGINS = [
    "http://localhost:3000",  # Next.js dev server
    "http://127.0.0.1:3000",
    "https://localhost:3000",
]

# Stencil defaults
DEFAULT_STYLE_ID = styles.DEFAULT_STYLE_ID
DEFAULT_DETAIL = _env_int('STENCIL_DEFAULT_DETAIL', pipeline.DEFAULT_DETAIL)
DEFAULT_LINE_COLOR = pipeline.DEFAULT_LINE_COLOR
DEFAULT_EDGE_STRENGTH = pipeline.DEFAULT_EDGE_STRENGTH

# Image limits
MAX_IMAGE_SIZE = (
    _env_int('STENCIL_MAX_WIDTH', 2048),
    _env_int('STENCIL_MAX_HEIGHT', 2048),
)  # (width, height), larger uploads are downscaled
MAX_UPLOAD_BYTES = _env_int('STENCIL_MAX_UPLOAD_BYTES', codec.MAX_UPLOAD_BYTES)
ALLOWED_CONTENT_TYPES = codec.ALLOWED_CONTENT_TYPES

# Processing timeouts
PROCESSING_TIMEOUT = _env_int('STENCIL_PROCESSING_TIMEOUT', 60)  # seconds
PROCESSING_WORKERS = 2

# Logging configuration
LOG_LEVEL = os.getenv('STENCIL_LOG_LEVEL', "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': LOG_FORMAT,
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
            'level': LOG_LEVEL,
        },
    },
    'root': {
        'level': LOG_LEVEL,
        'handlers': ['console'],
    },
}


def validate_config():
    """Validate configuration settings"""
    if not HOST or not PORT:
        raise ValueError("HOST and PORT must be configured")
    if PORT < 1 or PORT > 65535:
        raise ValueError("PORT must be between 1 and 65535")
    if not 0 <= DEFAULT_DETAIL <= 255:
        raise ValueError("DEFAULT_DETAIL must be between 0 and 255")
    if min(MAX_IMAGE_SIZE) < 1:
        raise ValueError("MAX_IMAGE_SIZE dimensions must be positive")
    if MAX_UPLOAD_BYTES < 1:
        raise ValueError("MAX_UPLOAD_BYTES must be positive")
    if PROCESSING_TIMEOUT < 1:
        raise ValueError("PROCESSING_TIMEOUT must be at least 1 second")
    return True
