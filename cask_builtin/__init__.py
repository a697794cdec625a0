"""Built-in collaborators for the caskroom engine."""
