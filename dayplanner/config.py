import os
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import List, Optional
from dotenv import load_dotenv
load_dotenv()

class Settings(BaseSettings):
    # Planner Settings
    default_days: int = 2
    max_days: int = 30
    default_start_time: str = "09:00"
    default_end_time: str = "17:00"
    default_transport: str = "public"
    allowed_origins: List[str] = ["http://localhost:3000"]

    # LLM Settings
    llm_model: str = "gemini-2.0-flash-lite"
    llm_temperature: float = 0.4
    llm_top_p: float = 0.95
    max_output_tokens: int = 4096
    plan_language: str = "Japanese"
    generation_timeout_seconds: Optional[float] = None  # unset: wait for the service

    # Planner Sessions
    session_idle_seconds: float = 3600
    max_sessions: int = 1000

    # Google Cloud Configuration
    google_cloud_project: str = ""
    vertex_ai_location: str = "us-central1"
    gemini_api_key: str = ""
    firebase_project_id: str = ""
    port: int = 8080

    # Document Store
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "dayplanner"

    # Pydantic V2 configuration (Python 3.13 compatible)
    model_config = ConfigDict(
        env_file=".env",
        extra="ignore"  # Allow extra environment variables without validation errors
    )

class CloudRunConfig:
    """Configuration for Cloud Run deployment"""

    # Environment Detection
    IS_CLOUD_RUN: bool = os.getenv("K_SERVICE") is not None

    # Google Cloud Configuration
    PROJECT_ID: str = os.getenv("GOOGLE_CLOUD_PROJECT", "")
    REGION: str = os.getenv("GOOGLE_CLOUD_REGION", "us-central1")
    PORT: int = int(os.getenv("PORT", "8080"))

settings = Settings()
cloud_config = CloudRunConfig()
