"""Command line interface for the caskroom engine."""
