from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# Load .env file if it exists, for local development
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()

class ApiSettings(BaseSettings):
    base_url: str = "http://localhost:3000/api"
    timeout: float = 30.0
    token: Optional[str] = None # Bearer token, sent when set
    question_page_limit: int = 100 # Questions fetched per domain

    model_config = SettingsConfigDict(env_prefix='ASSESSMENT_API_')

class EngineSettings(BaseSettings):
    log_level: str = "INFO"
    json_logs: bool = True

    model_config = SettingsConfigDict(env_prefix='ASSESSMENT_')

# Instantiate settings
api_settings = ApiSettings()
engine_settings = EngineSettings()
