"""picmark - upload local Markdown images to an image host."""

__version__ = "0.3.0"
