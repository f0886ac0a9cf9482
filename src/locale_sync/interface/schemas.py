"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class SyncRequest(BaseModel):
    """Request body for ``POST /sync``."""

    github_url: str
    overwrite: bool = False

    @field_validator("github_url")
    @classmethod
    def _must_be_github(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "github_url must not be empty."
            raise ValueError(msg)
        if "github.com" not in stripped.lower():
            msg = (
                f"Invalid URL: '{stripped}'. "
                "Only GitHub repository URLs are supported."
            )
            raise ValueError(msg)
        return stripped


class ProgressEvent(BaseModel):
    title: str
    detail: str


class SyncStatusResponse(BaseModel):
    """State of the latest sync of a repository."""

    repository: str
    overwrite: bool
    running: bool
    state: str | None = None
    success: bool | None = None
    message: str | None = None
    progress: list[ProgressEvent]
    downloaded: list[str] = []
    failed: list[str] = []


class LocaleInfo(BaseModel):
    locale: str
    modified: bool


class LocalesResponse(BaseModel):
    repository: str
    locales: list[LocaleInfo]
    any_modified: bool


class RepositoriesResponse(BaseModel):
    repositories: list[str]
