"""Config loader — YAML to dataclasses."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from scoredeck.actions import SCORE_ACTION_ID
from scoredeck.score import default_output_file


@dataclass
class DeckConfig:
    brightness: int = 30
    long_press_time: float = 0.5  # seconds
    settings_file: str = "~/.streamdeck-score/settings.json"


@dataclass
class ButtonConfig:
    pos: int
    action: str = SCORE_ACTION_ID
    restore_score: bool = False
    text_color: str | None = None
    save_to_file: bool = False
    file: str | None = None

    def initial_settings(self) -> dict:
        """Settings record used until the key has stored settings."""
        file = self.file
        if self.save_to_file and not file:
            file = str(default_output_file())
        return {
            "restore-score": self.restore_score,
            "score": 0,
            "text-color": self.text_color or "#ffffff",
            "save-to-file": self.save_to_file,
            "file": file,
        }


@dataclass
class AppConfig:
    deck: DeckConfig = field(default_factory=DeckConfig)
    buttons: list[ButtonConfig] = field(default_factory=list)


def load_config(path: Path) -> AppConfig:
    """Load config from YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    deck = DeckConfig(**{k: v for k, v in (raw.get("deck") or {}).items()})
    buttons = [ButtonConfig(**btn) for btn in (raw.get("buttons") or [])]

    return AppConfig(deck=deck, buttons=buttons)
