"""Rules and geometry engine for tri-dimensional chess."""
