"""Alpha-beta chess bot built on python-chess."""
