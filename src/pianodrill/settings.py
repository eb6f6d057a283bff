"""User settings persisted as JSON."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from pianodrill.config import REMOTE_API_KEY_ENV, REMOTE_BASE_URL, REMOTE_MODEL
from pianodrill.models import HandScope, LeftHandPolicy, PracticeConfig

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".pianodrill" / "settings.json"


@dataclass
class PracticeSettings:
    hand_scope: str = "SEPARATE"
    left_hand_policy: str = "NOTES"
    check_durations: bool = True
    show_note_names: bool = True
    metronome: bool = False
    soundfont: str = ""
    midi_port: int | None = None
    remote_model: str = REMOTE_MODEL
    remote_base_url: str = REMOTE_BASE_URL

    def get_hand_scope(self) -> HandScope:
        try:
            return HandScope[self.hand_scope]
        except KeyError:
            return HandScope.SEPARATE

    def get_left_hand_policy(self) -> LeftHandPolicy:
        try:
            return LeftHandPolicy[self.left_hand_policy]
        except KeyError:
            return LeftHandPolicy.NOTES

    def to_config(self) -> PracticeConfig:
        return PracticeConfig(
            hand_scope=self.get_hand_scope(),
            left_hand_policy=self.get_left_hand_policy(),
            check_durations=self.check_durations,
            show_note_names=self.show_note_names,
        )

    @property
    def api_key(self) -> str | None:
        # Never stored on disk
        return os.environ.get(REMOTE_API_KEY_ENV)


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> PracticeSettings:
    """Load settings from disk, returning defaults if absent or unreadable."""
    if not path.exists():
        return PracticeSettings()
    try:
        data = json.loads(path.read_text())
        practice = data.get("practice", {})
        return PracticeSettings(**{
            k: v for k, v in practice.items()
            if k in PracticeSettings.__dataclass_fields__
        })
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return PracticeSettings()


def save_settings(settings: PracticeSettings, path: Path = DEFAULT_SETTINGS_PATH) -> None:
    """Persist settings to disk, keeping any other top-level sections."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data: dict = {}
    if path.exists():
        try:
            data = json.loads(path.read_text())
        except ValueError:
            logger.warning("Overwriting unreadable settings file %s", path)
    if not isinstance(data, dict):
        logger.warning("Replacing non-object settings file %s", path)
        data = {}
    data["practice"] = asdict(settings)
    path.write_text(json.dumps(data, indent=2))
