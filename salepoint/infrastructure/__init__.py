"""Infrastructure layer: storage and the terminal gateway."""
