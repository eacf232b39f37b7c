import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    base_time: float = float(os.getenv("BASE_TIME", "30.0"))
    tick_interval: float = float(os.getenv("TICK_INTERVAL", "0.1"))
    low_time_warning: float = float(os.getenv("LOW_TIME_WARNING", "5.0"))
    storage_path: str = os.getenv("STORAGE_PATH", os.path.join("data", "colormatch.json"))
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG").upper()
    async_writes: bool = os.getenv("ASYNC_WRITES", "true").lower() == "true"

settings = Settings()
