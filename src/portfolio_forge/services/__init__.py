"""Generation, parsing and rendering services."""
