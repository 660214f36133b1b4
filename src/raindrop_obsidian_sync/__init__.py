"""Two-way sync between Raindrop.io bookmarks and an Obsidian vault."""

__version__ = "0.1.0"
