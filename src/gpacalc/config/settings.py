from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    preferences_path: str = os.getenv("GPACALC_PREFERENCES_PATH", "gpacalc_preferences.db")
    default_preset_id: str = os.getenv("GPACALC_DEFAULT_PRESET", "stockshsidgrade10")
    name_mode: str = os.getenv("GPACALC_NAME_MODE", "Percentage")
    log_level: str = os.getenv("GPACALC_LOG_LEVEL", "WARNING")


settings = Settings()
