"""Photo Journal Sync core package."""

__version__ = "1.0.0"
__description__ = (
    "Shared models, storage contracts, AWS adapters and the image cache "
    "of the photo journal sync layer"
)

__all__ = ["cache", "filters", "infrastructure", "models", "repositories", "utils"]
