"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``ontoctl.toml`` only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class GenerateConfig(BaseModel):
    """[generate] section: default program metadata and feature mask."""

    model_config = {"frozen": True}

    cli_name: str = "cli"
    version: str = "0.1.0"
    async_handlers: bool = False
    completions: bool = False
    man_page: bool = False
    colored_help: bool = False

    def feature_names(self) -> list[str]:
        names = ("async_handlers", "completions", "man_page", "colored_help")
        return [name for name in names if getattr(self, name)]


class QueryConfig(BaseModel):
    """[query] section."""

    model_config = {"frozen": True}

    backend: Literal["memory", "rdflib"] = "memory"
    default_format: Literal["json", "table", "yaml"] = "table"


class CacheConfig(BaseModel):
    """[cache] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    max_entries: int = Field(default=32, ge=1)


class SourcesConfig(BaseModel):
    """[sources] section."""

    model_config = {"frozen": True}

    allow_remote: bool = True
    http_timeout: float = Field(default=10.0, gt=0)
    max_bytes: int = Field(default=5_000_000, ge=1)


class ExportConfig(BaseModel):
    """[export] section."""

    model_config = {"frozen": True}

    base_iri: str = "https://cnv.dev/cli/"


class McpConfig(BaseModel):
    """[mcp] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"


class OntoConfig(BaseModel):
    """Top-level ``ontoctl.toml`` layout."""

    model_config = {"frozen": True}

    generate: GenerateConfig = Field(default_factory=GenerateConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    mcp: McpConfig = Field(default_factory=McpConfig)
