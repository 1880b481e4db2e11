from core.settings import Settings


class _SettingsHolder:
    """Settings built once on application startup and shared by every request."""

    current: Settings | None = None


def get_settings() -> Settings:
    if _SettingsHolder.current is None:
        raise RuntimeError("Settings not initialized; the app lifespan has not run")
    return _SettingsHolder.current


def init_settings(settings: Settings | None = None) -> Settings:
    _SettingsHolder.current = settings or Settings()
    return _SettingsHolder.current


def clear_settings():
    _SettingsHolder.current = None
