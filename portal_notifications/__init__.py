"""Event-driven notification core for the recruiting portal."""
