"""templint: incremental validation and transpilation of Jinja2 templates."""

__version__ = "0.3.0"
