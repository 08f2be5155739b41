from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    API_BASE_URL: str = Field(
        default="http://localhost:8000/api",
        validation_alias=AliasChoices("SALES_INVOICE_API_BASE_URL", "API_BASE_URL"),
    )
    # Home state of the issuing company; decides CGST+SGST vs IGST
    COMPANY_STATE: str = Field(
        default="Maharashtra",
        validation_alias=AliasChoices("SALES_INVOICE_COMPANY_STATE", "COMPANY_STATE"),
    )
    REQUEST_TIMEOUT: float = Field(
        default=30.0,
        validation_alias=AliasChoices("SALES_INVOICE_REQUEST_TIMEOUT", "REQUEST_TIMEOUT"),
    )
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))


@lru_cache
def get_settings() -> Settings:
    return Settings()
