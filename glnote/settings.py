"""Settings model, TOML persistence and migration of older config shapes."""

import logging
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from glnote.providers.gitlab import DEFAULT_GITLAB_URL

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "glnote" / "config.toml"

# Single-project keys from before the project picker existed.
DEPRECATED_KEYS = ("project_id", "projectId")

# Key names used by the plugin's JSON settings file.
LEGACY_KEY_NAMES = {
    "defaultLabels": "default_labels",
    "gitlabUrl": "gitlab_url",
    "favProjects": "fav_projects",
}


class GlnoteSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GLNOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    token: SecretStr = SecretStr("")
    default_labels: str = ""  # comma-separated, parsed on use
    gitlab_url: str = DEFAULT_GITLAB_URL
    fav_projects: list[int] = []

    @field_validator("gitlab_url")
    @classmethod
    def _blank_url_is_default(cls, value: str) -> str:
        return value.strip() or DEFAULT_GITLAB_URL

    @field_validator("fav_projects")
    @classmethod
    def _unique_favorites(cls, value: list[int]) -> list[int]:
        return list(dict.fromkeys(value))

    @property
    def has_token(self) -> bool:
        return bool(self.token.get_secret_value().strip())

    def labels(self) -> list[str]:
        return [label.strip() for label in self.default_labels.split(",") if label.strip()]

    def is_favorite(self, project_id: int) -> bool:
        return project_id in self.fav_projects


def migrate(raw: dict[str, Any]) -> dict[str, Any]:
    """Bring a loaded config mapping up to the current key set.

    Deprecated keys are removed, plugin-style camelCase keys renamed, and
    anything the settings model does not define is dropped.
    """
    data = dict(raw)
    for key in DEPRECATED_KEYS:
        data.pop(key, None)
    for old, new in LEGACY_KEY_NAMES.items():
        if old in data:
            value = data.pop(old)
            data.setdefault(new, value)
    known = GlnoteSettings.model_fields.keys()
    return {k: v for k, v in data.items() if k in known}


class SettingsStore:
    """Owns the process-wide settings and writes them back after every change.

    Only values that came from the config file or from an explicit change are
    written back. Anything supplied through ``GLNOTE_*`` variables stays in the
    environment.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or CONFIG_PATH
        self._settings: GlnoteSettings | None = None
        self._file_data: dict[str, Any] = {}

    @property
    def settings(self) -> GlnoteSettings:
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def _read_document(self) -> tomlkit.TOMLDocument:
        if not self.path.exists():
            return tomlkit.document()
        with self.path.open() as fh:
            return tomlkit.load(fh)

    def load(self) -> GlnoteSettings:
        doc = self._read_document()
        raw = doc.unwrap()
        data = migrate(raw)
        self._file_data = dict(data)
        self._settings = GlnoteSettings(**data)
        if self.path.exists() and data != raw:
            logger.debug("Migrated settings in %s", self.path)
            self.save()
        return self._settings

    def save(self) -> None:
        if self._settings is None:
            self.load()
        # Round-trip the existing document so comments survive.
        doc = self._read_document()
        for key in list(doc.keys()):
            if key not in self._file_data:
                del doc[key]
        for key, value in self._file_data.items():
            doc[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(tomlkit.dumps(doc))

    def _remember(self, key: str) -> None:
        value = getattr(self.settings, key)
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        elif isinstance(value, list):
            value = list(value)
        self._file_data[key] = value

    def update(self, **changes: Any) -> GlnoteSettings:
        settings = self.settings
        for key, value in changes.items():
            setattr(settings, key, value)
            self._remember(key)
        self.save()
        return settings

    def toggle_favorite(self, project_id: int) -> bool:
        """Flip favorite membership and persist. Returns the new membership."""
        settings = self.settings
        if settings.is_favorite(project_id):
            settings.fav_projects = [pid for pid in settings.fav_projects if pid != project_id]
            now_favorite = False
        else:
            settings.fav_projects = [*settings.fav_projects, project_id]
            now_favorite = True
        self._remember("fav_projects")
        self.save()
        return now_favorite
