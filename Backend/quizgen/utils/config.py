from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    google_api_key: str = ""
    api_base: str = "https://generativelanguage.googleapis.com/v1beta/models"
    llm_model: str = "gemini-1.5-flash-latest"
    request_timeout: float = 60.0
    max_upload_mb: int = 20
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def generate_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/{self.llm_model}:generateContent"

settings = Settings()
