"""Stream Deck score counter."""
