"""Domain layer: documents, field paths, transforms and the composition engine."""
