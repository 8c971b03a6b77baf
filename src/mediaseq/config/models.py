"""Configuration models describing mediaseq settings."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mediaseq.naming.models import RenameConfig, SortStrategy

MediaCategory = Literal["image", "video", "audio"]


class MediaseqBaseModel(BaseModel):
    """Shared configuration for mediaseq Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class RenameSettings(MediaseqBaseModel):
    """Saved naming template used when the CLI receives no overrides.

    Attributes:
        prefix: Text placed before the sequence number.
        start_number: First sequence number.
        digit_count: Minimum width of the zero-padded number.
        preserve_extension: Whether the original extension is kept.
        sort_strategy: Ordering applied before numbering.
        use_metadata: Whether ``{variable}`` tokens in the prefix are expanded
            from EXIF metadata.
    """

    prefix: str = "photo"
    start_number: int = 1
    digit_count: int = 3
    preserve_extension: bool = True
    sort_strategy: SortStrategy = SortStrategy.NATURAL
    use_metadata: bool = False

    def to_rename_config(self) -> RenameConfig:
        """Return the naming template described by these settings."""
        return RenameConfig(
            prefix=self.prefix,
            start_number=self.start_number,
            digit_count=self.digit_count,
            preserve_extension=self.preserve_extension,
            sort_strategy=self.sort_strategy,
        )


class ScanSettings(MediaseqBaseModel):
    """Options controlling which files a batch operates on.

    Attributes:
        recursive: Whether subdirectories are included.
        include_hidden: Whether dot-files are included.
        follow_symlinks: Whether symbolic links are followed.
        media_types: Media categories to include.
        pattern: Optional wildcard filter on file names.
    """

    recursive: bool = False
    include_hidden: bool = False
    follow_symlinks: bool = False
    media_types: List[MediaCategory] = Field(default_factory=lambda: ["image", "video"])
    pattern: Optional[str] = None


class WatchSettings(MediaseqBaseModel):
    """Folder monitor defaults.

    Attributes:
        recursive: Whether subfolders are monitored.
        pattern: Optional wildcard filter on new file names.
        health_interval_seconds: How often the monitor checks its watch source.
    """

    recursive: bool = False
    pattern: Optional[str] = None
    health_interval_seconds: float = Field(default=1.0, gt=0)


class LoggingSettings(MediaseqBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class CLIOptions(MediaseqBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
        progress_enabled: Whether batch renames show a progress bar.
    """

    quiet_default: bool = False
    summary_default: bool = False
    progress_enabled: bool = True


class MediaseqConfig(MediaseqBaseModel):
    """Top-level configuration struct for mediaseq.

    Attributes:
        rename: Default naming template.
        scan: File selection settings.
        watch: Folder monitor settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    rename: RenameSettings = Field(default_factory=RenameSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "MediaseqBaseModel",
    "RenameSettings",
    "ScanSettings",
    "WatchSettings",
    "LoggingSettings",
    "CLIOptions",
    "MediaseqConfig",
]
