# scoredeck/daemon.py
"""Stream Deck Score — main daemon."""

import argparse
import logging
import sys
import threading
from pathlib import Path

from StreamDeck.DeviceManager import DeviceManager
from StreamDeck.ImageHelpers import PILHelper

from scoredeck.actions import Action, ActionFactory, default_factory
from scoredeck.config import AppConfig, load_config
from scoredeck.renderer import render_blank
from scoredeck.settings import SettingsStore

logger = logging.getLogger(__name__)

KEY_SIZE = (96, 96)


def find_deck():
    """Find first visual Stream Deck device."""
    decks = DeviceManager().enumerate()
    for deck in decks:
        if deck.is_visual():
            return deck
    return None


class ScoreDeck:
    """Main application class."""

    def __init__(self, config: AppConfig, deck, store: SettingsStore,
                 factory: ActionFactory | None = None, scheduler=None):
        self.config = config
        self.deck = deck
        self.store = store
        self.factory = factory or default_factory()
        self.scheduler = scheduler
        self.actions: dict[int, Action] = {}

    def start(self):
        """Initialize deck, build actions and register the key callback."""
        self.deck.open()
        self.deck.reset()
        self.deck.set_brightness(self.config.deck.brightness)

        for btn in self.config.buttons:
            action = self.factory.create_action(
                btn.action,
                long_press_time=self.config.deck.long_press_time,
                scheduler=self.scheduler,
            )
            if action is None:
                continue
            settings = self.store.load(btn.pos)
            if settings is None:
                settings = btn.initial_settings()
            action.deserialize(settings)
            action.add_observer(lambda a, pos=btn.pos: self._on_action_changed(pos, a))
            self.actions[btn.pos] = action
            self.store.save(btn.pos, action.serialize())

        # Render initial button images
        for key in range(self.deck.key_count()):
            self._render_key(key)

        self.deck.set_key_callback(self._on_key_change)
        logger.info("Started with %d action(s)", len(self.actions))

    def stop(self):
        """Shutdown cleanly."""
        # Held keys must not fire their timers into a closed device
        for action in self.actions.values():
            action.cancel()
        with self.deck:
            self.deck.reset()
            self.deck.close()

    def _render_key(self, key: int):
        """Render and set a key image on the deck."""
        action = self.actions.get(key)
        img = action.render(KEY_SIZE) if action else render_blank(KEY_SIZE)
        native = PILHelper.to_native_key_format(self.deck, img)
        with self.deck:
            self.deck.set_key_image(key, native)

    def _on_action_changed(self, pos: int, action: Action):
        """Called whenever an action's score or settings change."""
        self._render_key(pos)
        self.store.save(pos, action.serialize())

    def _on_key_change(self, deck, key: int, pressed: bool):
        """Handle physical button press and release."""
        action = self.actions.get(key)
        if action is None:
            return

        logger.debug("Button %d %s", key, "pressed" if pressed else "released")
        if pressed:
            action.on_activate()
        else:
            action.on_deactivate()


def main():
    parser = argparse.ArgumentParser(description="Stream Deck Score daemon")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Config not found: {config_path}")
        sys.exit(1)

    config = load_config(config_path)

    deck = find_deck()
    if deck is None:
        print("No Stream Deck found. Is it plugged in?")
        sys.exit(1)

    store = SettingsStore(Path(config.deck.settings_file))
    app = ScoreDeck(config=config, deck=deck, store=store)
    print(f"Connected: {deck.deck_type()} ({deck.key_count()} keys)")
    app.start()

    try:
        # Block main thread
        threading.Event().wait()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        app.stop()
        print("Done.")


if __name__ == "__main__":
    main()
