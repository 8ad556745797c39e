from pydantic import BaseModel, Field, field_validator

from foliosync.core.config import settings


def _default_paths() -> list[str]:
    return list(settings.DEFAULT_MONITORED_PATHS)


class UserSettings(BaseModel):
    """
    User-editable settings persisted next to the sync state.

    ``monitored_paths`` is only read by the display layer.
    """
    cache_duration_minutes: int = Field(
        default_factory=lambda: settings.DEFAULT_CACHE_DURATION_MINUTES, ge=1, le=60
    )
    monitored_paths: list[str] = Field(default_factory=_default_paths)

    @field_validator("monitored_paths")
    @classmethod
    def _strip_paths(cls, value: list[str]) -> list[str]:
        paths = [path.strip() for path in value if path and path.strip()]
        if not paths:
            raise ValueError("at least one monitored path is required")
        return paths
