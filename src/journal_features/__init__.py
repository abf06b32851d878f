"""Photo Journal Sync feature components."""

__version__ = "1.0.0"
__description__ = (
    "Gallery reconciliation, transformation job tracking and the social feed "
    "built on journal_core"
)

__all__ = ["feed", "gallery", "photos", "transform_jobs"]
