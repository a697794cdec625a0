"""Caskroom engine: installed-version tracking, definition resolution and uninstallation."""
