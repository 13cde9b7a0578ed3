"""Prepare Markdown inputs and templates for conversion to formatted documents."""

from .config import AppConfig, load_config
from .core import FormatToolsService
from .errors import FormatToolsError
from .models import (
    ConversionResult,
    ConvertOptions,
    FileSource,
    InputSource,
    PreparedInput,
    TemplateCatalog,
    TemplateInfo,
    TextSource,
)

__all__ = [
    "AppConfig",
    "load_config",
    "FormatToolsService",
    "FormatToolsError",
    "ConversionResult",
    "ConvertOptions",
    "FileSource",
    "InputSource",
    "PreparedInput",
    "TemplateCatalog",
    "TemplateInfo",
    "TextSource",
]
