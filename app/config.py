from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path

# Get the project directory (parent of app directory)
PROJECT_DIR = Path(__file__).parent.parent
ENV_FILE = PROJECT_DIR / ".env"

class Settings(BaseSettings):
    # Server settings
    host: str = "0.0.0.0"
    port: int = 4000
    cors_origins: List[str] = ["*"]
    
    # Shared secret expected in the X-Admin-Key header
    admin_key: str = "admin123"
    
    # Database settings
    database_url: str = "sqlite:///./data.sqlite"
    
    # Timezone used by the application clock (timestamps are always stored as UTC)
    timezone: str = "UTC"
    
    # Rental reminders
    reminder_window_days: int = 3  # Window shown on the admin reminders endpoint
    
    # Background sweeper
    sweeper_enabled: bool = True
    sweeper_interval_seconds: float = 60
    sweeper_reminder_window_days: int = 1
    
    # Insert the example books when the catalog is empty
    seed_example_books: bool = True
    
    class Config:
        env_file = str(ENV_FILE) if ENV_FILE.exists() else ".env"
        case_sensitive = False

settings = Settings()
