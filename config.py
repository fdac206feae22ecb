from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings


class ServerSettings(BaseSettings):
    host: str = Field("0.0.0.0")
    port: int = Field(3000, ge=0, le=65535)
    log_level: str = Field("INFO")

    server_name: str = Field("mcp-streamable-http")
    server_version: str = Field("1.0.0")

    chuck_api_base_url: HttpUrl = Field("https://api.chucknorris.io")
    dad_joke_api_url: HttpUrl = Field("https://icanhazdadjoke.com")

    class Config:
        env_file = ".env"
        extra = "ignore"
