# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
import base64
from typing import List
from pathlib import Path

class Settings(BaseSettings):
    # Storage settings
    # "sheets" talks to Google; "memory" keeps everything in-process (demos/tests)
    storage_backend: str = "sheets"
    google_sa_json: str = ""
    google_sa_json_base64: str = ""

    # Master catalog: one row per project in tab PROJECTES
    # Can be a spreadsheet id. Example:
    # MASTER_SHEET_ID=1AbC...xyz
    master_sheet_id: str = ""
    master_tab_name: str = "PROJECTES"

    # Every project spreadsheet is named "<prefix><project name>"
    spreadsheet_title_prefix: str = "ARCHI - "

    # Google Drive settings
    # If you create the root folder manually & share it, put its ID here.
    # Otherwise a folder with this name is found/created in My Drive.
    gdrive_root_folder_id: str = ""
    gdrive_root_folder_name: str = ""

    # Gemini (drafting assistant). Empty key = assistant disabled.
    gemini_api_key: str = Field(default="", description="Google AI Studio API key")
    gemini_model: str = "gemini-3-flash-preview"

    # Simulated duration of each export step
    export_step_delay_seconds: float = 1.2

    # How long an authorized gspread client is reused per credential
    client_cache_ttl_seconds: int = 1800

    # CORS settings
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def resolved_google_sa_json(self) -> str:
        """
        Service account as a JSON string or a file path.
        GOOGLE_SA_JSON_BASE64 wins over GOOGLE_SA_JSON when both are set.
        """
        if self.google_sa_json_base64:
            return base64.b64decode(self.google_sa_json_base64).decode("utf-8")
        return self.google_sa_json

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
