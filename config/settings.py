"""
Settings Configuration
Pydantic-validated configuration for the refresh pipeline.
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122 Safari/537.36"
)


class GeneralSettings(BaseSettings):
    """Shared HTTP settings"""
    request_timeout: float = Field(default=20.0, description="Timeout for every outbound request (seconds)")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header")

    class Config:
        env_prefix = "GENERAL_"


class SearchSettings(BaseSettings):
    """Search provider configuration"""
    provider: str = Field(default="serper", description="Search provider: serper, serpapi, html")
    serper_api_key: Optional[str] = Field(default=None, description="Serper API key")
    serpapi_api_key: Optional[str] = Field(default=None, description="SerpApi API key")
    proxy_base_url: str = Field(default="https://r.jina.ai", description="Text-rendering proxy")
    max_candidates: int = Field(default=5, description="Accepted candidate ceiling per article")

    class Config:
        env_prefix = "SEARCH_"


class LLMSettings(BaseSettings):
    """Text-generation backend configuration"""
    provider: str = Field(default="auto", description="LLM provider: auto, openai, huggingface")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI chat model")
    openai_base_url: Optional[str] = Field(default=None, description="OpenAI-compatible base URL")
    hf_api_key: Optional[str] = Field(default=None, description="Hugging Face inference token")
    hf_model: str = Field(default="HuggingFaceH4/zephyr-7b-beta", description="Hugging Face model id")
    hf_base_url: str = Field(
        default="https://api-inference.huggingface.co/models",
        description="Hugging Face inference base URL",
    )
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_tokens: int = Field(default=1200, description="Maximum generated tokens")
    request_timeout: float = Field(default=60.0, description="Timeout for generation requests (seconds)")
    max_attempts: int = Field(default=3, description="Attempt ceiling for capacity errors")
    retry_margin_seconds: float = Field(default=1.0, description="Added to the server wait hint")
    original_max_chars: int = Field(default=3500, description="Original text budget in the prompt")
    reference_max_chars: int = Field(default=2500, description="Per-reference text budget in the prompt")

    class Config:
        env_prefix = "LLM_"


class ArticleStoreSettings(BaseSettings):
    """Article Store API configuration"""
    base_url: str = Field(default="http://localhost:8000/api", description="Article Store API base URL")

    class Config:
        env_prefix = "ARTICLE_STORE_"


class RunSettings(BaseSettings):
    """Batch run configuration"""
    max_originals: int = Field(default=5, description="Originals processed per run")
    skip_if_updated: bool = Field(default=True, description="Skip originals that already have an update")
    min_references: int = Field(default=2, description="Extracted references required per article")
    article_delay_seconds: float = Field(default=1.0, description="Pause between articles")
    status_path: str = Field(default="./data/automation_status.json", description="Status file location")
    status_max_age_seconds: int = Field(default=1800, description="Age after which a running status is stale")
    origin_hosts: List[str] = Field(default_factory=lambda: ["beyondchats.com"], description="Hosts never used as references")
    title_suffixes: List[str] = Field(default_factory=lambda: ["BeyondChats"], description="Brand suffixes stripped from queries")

    class Config:
        env_prefix = "RUN_"


class Settings(BaseSettings):
    """Aggregated configuration"""

    general: GeneralSettings = Field(default_factory=GeneralSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    article_store: ArticleStoreSettings = Field(default_factory=ArticleStoreSettings)
    run: RunSettings = Field(default_factory=RunSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """Load settings after exporting a .env file into the environment."""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"
            if not env_path.exists():
                env_path = Path.cwd() / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            general=GeneralSettings(),
            search=SearchSettings(),
            llm=LLMSettings(),
            article_store=ArticleStoreSettings(),
            run=RunSettings(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings singleton"""
    return Settings.load_from_env_file()


def get_search_settings() -> SearchSettings:
    return get_settings().search


def get_llm_settings() -> LLMSettings:
    return get_settings().llm


def get_run_settings() -> RunSettings:
    return get_settings().run
