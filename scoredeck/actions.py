"""Button actions and the registry that creates them."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from scoredeck.press_timer import PressPhase, PressTimer
from scoredeck.renderer import render_score
from scoredeck.score import Color, ScoreController

logger = logging.getLogger(__name__)

SCORE_ACTION_ID = "gaming-score-action"


class Action:
    """Interface every button action implements."""

    id: str = ""

    def on_activate(self) -> None:
        raise NotImplementedError

    def on_deactivate(self) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        """Drop any press in progress, e.g. on shutdown."""
        raise NotImplementedError

    def serialize(self) -> dict:
        raise NotImplementedError

    def deserialize(self, settings: dict) -> None:
        raise NotImplementedError

    def add_observer(self, callback: Callable[[Action], None]) -> None:
        raise NotImplementedError

    def render(self, size: tuple[int, int] = (96, 96)) -> Image.Image:
        raise NotImplementedError


class ScoreAction(Action):
    """Short press adds a point, long press removes one, very long press resets."""

    id = SCORE_ACTION_ID

    def __init__(self, long_press_time: float = 0.5, scheduler=None,
                 output_file: Path | None = None):
        self.controller = ScoreController(output_file=output_file)
        self.press_timer = PressTimer(
            long_press_time,
            on_short=self.controller.increment,
            on_long=self.controller.decrement,
            on_very_long=self.controller.reset,
            scheduler=scheduler,
        )

    @property
    def score(self) -> int:
        return self.controller.score

    @property
    def overlay_color(self) -> Color:
        return self.controller.overlay_color

    @property
    def phase(self) -> PressPhase:
        return self.press_timer.phase

    def on_activate(self):
        self.press_timer.on_activate()

    def on_deactivate(self):
        self.press_timer.on_deactivate()

    def cancel(self):
        self.press_timer.cancel()

    def serialize(self) -> dict:
        return self.controller.serialize()

    def deserialize(self, settings: dict):
        with self.press_timer.lock:
            self.controller.deserialize(settings)

    def set_output_file(self, path: Path | None):
        with self.press_timer.lock:
            self.controller.set_output_file(path)

    def add_observer(self, callback: Callable[[Action], None]):
        self.controller.add_observer(lambda _controller: callback(self))

    def render(self, size: tuple[int, int] = (96, 96)) -> Image.Image:
        return render_score(self.score, self.overlay_color, size=size)


@dataclass
class ActionInfo:
    id: str
    name: str
    description: str = ""
    icon_name: str | None = None


class ActionFactory:
    """Maps action ids to their info and constructor."""

    def __init__(self):
        self.infos: dict[str, ActionInfo] = {}
        self._constructors: dict[str, Callable[..., Action]] = {}

    def add_action(self, info: ActionInfo, constructor: Callable[..., Action]) -> None:
        if info.id in self.infos:
            raise ValueError(f"Action '{info.id}' already registered")
        self.infos[info.id] = info
        self._constructors[info.id] = constructor

    def create_action(self, action_id: str, **kwargs) -> Action | None:
        """Build an action by id. Returns None for unknown ids."""
        constructor = self._constructors.get(action_id)
        if constructor is None:
            logger.warning("Unknown action '%s'", action_id)
            return None
        return constructor(**kwargs)


def default_factory() -> ActionFactory:
    factory = ActionFactory()
    factory.add_action(
        ActionInfo(
            id=SCORE_ACTION_ID,
            name="Score",
            description="Keep track of your score. Reset with a long press.",
            icon_name="score-symbolic",
        ),
        ScoreAction,
    )
    return factory
