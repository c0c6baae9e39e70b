from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional


class ConversionSettings(BaseSettings):
    """Turtle to HTML conversion configuration"""
    page_title: str = Field(default="Definitions", description="Title of every converted page")
    index_title: str = Field(default="Index of RDF Files", description="Title of the index page")
    input_extension: str = Field(default=".ttl", description="Suffix of the files to convert")
    output_extension: str = Field(default=".html", description="Suffix of the generated pages")
    index_filename: str = Field(default="index.html", description="Index file name in the output root")
    encoding: str = Field(default="utf-8", description="Encoding of input and output files")
    
    # Parsing behaviour
    strict_parsing: bool = Field(
        default=False,
        description="Fail a file on its first malformed statement instead of skipping it"
    )
    base_iri: Optional[str] = Field(
        default=None,
        description="Base IRI for relative IRIs in documents without @base"
    )
    
    model_config = SettingsConfigDict(
        env_prefix='RDFDOCS_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )


class RenderingSettings(BaseSettings):
    """HTML template configuration"""
    template_dir: Optional[Path] = Field(
        default=None,
        description="Directory with page.html and index.html (bundled templates if unset)"
    )
    
    model_config = SettingsConfigDict(
        env_prefix='TEMPLATE_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )


class AppSettings(BaseSettings):
    """Application settings"""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )
    
    # Component settings
    conversion: ConversionSettings = Field(default_factory=ConversionSettings)
    rendering: RenderingSettings = Field(default_factory=RenderingSettings)
    
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )


# Singleton instance
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get application settings (singleton)"""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings
