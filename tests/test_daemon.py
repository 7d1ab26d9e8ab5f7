"""Tests for Stream Deck discovery and key handling."""

from unittest.mock import MagicMock, patch

from scoredeck.config import AppConfig, ButtonConfig, DeckConfig
from scoredeck.settings import SettingsStore


def test_find_deck_returns_first_visual_deck():
    """find_deck should return the first visual StreamDeck device."""
    mock_deck = MagicMock()
    mock_deck.is_visual.return_value = True
    mock_deck.key_count.return_value = 15

    with patch("scoredeck.daemon.DeviceManager") as MockDM:
        MockDM.return_value.enumerate.return_value = [mock_deck]
        from scoredeck.daemon import find_deck

        deck = find_deck()
        assert deck is not None
        assert deck.key_count() == 15


def test_find_deck_returns_none_when_no_devices():
    """find_deck should return None when no devices are connected."""
    with patch("scoredeck.daemon.DeviceManager") as MockDM:
        MockDM.return_value.enumerate.return_value = []
        from scoredeck.daemon import find_deck

        assert find_deck() is None


def _make_app(tmp_path, scheduler, buttons):
    from scoredeck.daemon import ScoreDeck

    deck = MagicMock()
    deck.key_count.return_value = 6
    config = AppConfig(deck=DeckConfig(long_press_time=0.5), buttons=buttons)
    store = SettingsStore(tmp_path / "settings.json")
    app = ScoreDeck(config=config, deck=deck, store=store, scheduler=scheduler)
    return app, deck, store


def test_start_builds_actions_and_renders_all_keys(tmp_path, scheduler):
    with patch("scoredeck.daemon.PILHelper") as MockHelper:
        app, deck, store = _make_app(
            tmp_path, scheduler, [ButtonConfig(pos=1), ButtonConfig(pos=4, action="bogus")]
        )
        app.start()

    assert list(app.actions) == [1]
    assert deck.set_key_image.call_count == 6
    assert MockHelper.to_native_key_format.call_count == 6
    deck.set_key_callback.assert_called_once_with(app._on_key_change)
    assert store.load(1)["score"] == 0


def test_key_presses_drive_score_and_save(tmp_path, scheduler):
    with patch("scoredeck.daemon.PILHelper"):
        app, deck, store = _make_app(
            tmp_path, scheduler, [ButtonConfig(pos=2, restore_score=True)]
        )
        app.start()
        deck.set_key_image.reset_mock()

        app._on_key_change(deck, 2, True)
        app._on_key_change(deck, 2, False)
        app._on_key_change(deck, 0, True)

    assert app.actions[2].score == 1
    assert store.load(2)["score"] == 1
    deck.set_key_image.assert_called_once()
    assert deck.set_key_image.call_args[0][0] == 2


def test_stored_settings_take_precedence(tmp_path, scheduler):
    store = SettingsStore(tmp_path / "settings.json")
    store.save(0, {"restore-score": True, "score": 8, "text-color": "#00ff00"})

    with patch("scoredeck.daemon.PILHelper"):
        app, _deck, _store = _make_app(
            tmp_path, scheduler, [ButtonConfig(pos=0, text_color="#ff0000")]
        )
        app.start()

    action = app.actions[0]
    assert action.score == 8
    assert action.overlay_color == (0, 255, 0, 255)


def test_stop_cancels_held_presses(tmp_path, scheduler):
    with patch("scoredeck.daemon.PILHelper"):
        app, deck, _store = _make_app(tmp_path, scheduler, [ButtonConfig(pos=0)])
        app.start()
        app._on_key_change(deck, 0, True)
        app.stop()
        deck.set_key_image.reset_mock()
        scheduler.advance(10)

    assert not scheduler.live
    assert app.actions[0].score == 0
    deck.set_key_image.assert_not_called()
    deck.close.assert_called_once()
