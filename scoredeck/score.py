"""Score state, file mirroring and settings (de)serialization."""

from __future__ import annotations

import contextlib
import logging
import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path

from PIL import ImageColor

logger = logging.getLogger(__name__)

Color = tuple[int, int, int, int]

DEFAULT_COLOR: Color = (255, 255, 255, 255)


def default_output_file() -> Path:
    """~/Documents/score.txt, or ~/score.txt without a Documents folder."""
    documents = Path.home() / "Documents"
    if not documents.is_dir():
        documents = Path.home()
    return documents / "score.txt"


def parse_color(value, default: Color = DEFAULT_COLOR) -> Color:
    """Parse a CSS-style color string into RGBA. Falls back to default."""
    if not isinstance(value, str):
        return default
    try:
        return ImageColor.getcolor(value.strip(), "RGBA")
    except ValueError:
        return default


def format_color(color: Color) -> str:
    """Hex string for a color: #rrggbb when opaque, #rrggbbaa otherwise."""
    r, g, b, a = color
    if a == 255:
        return f"#{r:02x}{g:02x}{b:02x}"
    return f"#{r:02x}{g:02x}{b:02x}{a:02x}"


def write_text_atomic(path: Path, text: str) -> None:
    """Replace path's contents via a temp file in the same directory.

    Symlinks are followed and an existing file keeps its permission bits.
    New files are created 0644.
    """
    path = Path(os.path.realpath(path))
    try:
        mode = stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        mode = 0o644
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(text)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise


class ScoreController:
    """Owns the score and its settings.

    Observers are called with the controller after every change. Inside
    batch() notifications are held back and delivered once at the end.
    """

    def __init__(self, output_file: Path | None = None):
        self._score = 0
        self._color: Color = DEFAULT_COLOR
        self.restore_score = False
        self.save_to_file = False
        self.output_file = Path(output_file).expanduser() if output_file else None
        self._observers: list[Callable[[ScoreController], None]] = []
        self._batch_depth = 0
        self._dirty = False

    # -- observation -------------------------------------------------------

    def add_observer(self, callback: Callable[[ScoreController], None]):
        self._observers.append(callback)

    def _notify(self):
        if self._batch_depth:
            self._dirty = True
            return
        for callback in list(self._observers):
            callback(self)

    @contextlib.contextmanager
    def batch(self):
        """Apply several changes with a single notification."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if not self._batch_depth and self._dirty:
                self._dirty = False
                self._notify()

    # -- state ---------------------------------------------------------------

    @property
    def score(self) -> int:
        return self._score

    @score.setter
    def score(self, value: int):
        if value != self._score:
            self._score = value
            self._notify()

    @property
    def overlay_color(self) -> Color:
        return self._color

    @overlay_color.setter
    def overlay_color(self, value: Color):
        value = tuple(value)
        if value != self._color:
            self._color = value
            self._notify()

    # -- mutations -------------------------------------------------------------
    # Each mutation writes the file before observers run, so a failing
    # observer cannot skip the write.

    def increment(self):
        logger.debug("Incrementing")
        with self.batch():
            self.score += 1
            self.persist()

    def decrement(self):
        logger.debug("Decrementing")
        with self.batch():
            self.score -= 1
            self.persist()

    def reset(self):
        logger.debug("Resetting")
        with self.batch():
            self.score = 0
            self.persist()

    def set_output_file(self, path: Path | None):
        """Point mirroring at a new file and write the current score to it."""
        with self.batch():
            self.output_file = Path(path).expanduser() if path else None
            self._notify()
            self.persist()

    def persist(self) -> bool:
        """Mirror the score to output_file. Returns True if a write happened.

        Failures are logged and dropped; the next mutation writes again.
        """
        if not (self.save_to_file and self.output_file):
            return False
        try:
            write_text_atomic(self.output_file, str(self._score))
        except OSError:
            logger.warning("Could not write score to %s", self.output_file, exc_info=True)
            return False
        return True

    # -- settings --------------------------------------------------------------

    def serialize(self) -> dict:
        return {
            "restore-score": self.restore_score,
            "score": self._score,
            "text-color": format_color(self._color),
            "save-to-file": self.save_to_file,
            "file": str(self.output_file) if self.output_file else None,
        }

    def deserialize(self, settings: dict):
        """Apply a settings record. Missing or malformed fields use defaults."""
        with self.batch():
            self.restore_score = _get_bool(settings, "restore-score")
            if self.restore_score:
                score = settings.get("score")
                if isinstance(score, int) and not isinstance(score, bool):
                    self.score = score

            self.overlay_color = parse_color(settings.get("text-color"))
            self.save_to_file = _get_bool(settings, "save-to-file")

            file = settings.get("file")
            if isinstance(file, str) and file:
                self.output_file = Path(file).expanduser()
            # Flags and file have no setters; report them with the rest
            self._notify()


def _get_bool(settings: dict, key: str, default: bool = False) -> bool:
    value = settings.get(key, default)
    return value if isinstance(value, bool) else default
