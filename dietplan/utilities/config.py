"""Configuration management for the diet plan tracker."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# AI meal generation
OPENAI_API_KEY: Final[str] = os.getenv('OPENAI_API_KEY', '')
AI_MODEL: Final[str] = os.getenv('AI_MODEL', 'gpt-4o-mini')

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

# Event polling buffer
EVENT_BUFFER_SIZE: Final[int] = int(os.getenv('EVENT_BUFFER_SIZE', '300'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('DIETPLAN_DATA_DIR', str(BASE_DIR / 'data'))).expanduser()
