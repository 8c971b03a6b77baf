"""Naming primitives: models, natural ordering, generation, and validation."""

from .models import MediaItem, RenameConfig, SortStrategy
from .sorting import compare_natural, natural_key, sort_items, split_runs
from .validator import ValidationResult, validate_filename
from .generator import FilenameGenerator, MetadataFilenameGenerator, generate_filename

__all__ = [
    "MediaItem",
    "RenameConfig",
    "SortStrategy",
    "compare_natural",
    "natural_key",
    "sort_items",
    "split_runs",
    "ValidationResult",
    "validate_filename",
    "FilenameGenerator",
    "MetadataFilenameGenerator",
    "generate_filename",
]
