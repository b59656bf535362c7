# Wire schemas for the EzShare browse API.
# Created: 2026-10-02

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FileEntry(BaseModel):
    """A single file or directory inside a listing."""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(validation_alias=AliasChoices("fileName", "file_name"))
    path: str
    is_dir: bool = Field(default=False, validation_alias=AliasChoices("isDir", "is_dir"))


class DirectoryListing(BaseModel):
    """Server snapshot of one directory.

    ``requested_or_current_path`` is whatever the server echoed back. It is the
    only path this listing can be trusted for, regardless of what was asked.
    A freshly constructed listing is empty and echoes no path at all.
    """

    model_config = ConfigDict(frozen=True)

    requested_or_current_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "curRelPath", "requestedOrCurrentPath", "requested_or_current_path"
        ),
    )
    shared_root_label: str = Field(
        default="",
        validation_alias=AliasChoices("sharedPath", "sharedRootLabel", "shared_root_label"),
    )
    entries: tuple[FileEntry, ...] = Field(
        default=(),
        validation_alias=AliasChoices("files", "entries"),
    )
