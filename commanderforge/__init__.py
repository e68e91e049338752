"""CommanderForge: Commander deck auto-building from a card collection."""
