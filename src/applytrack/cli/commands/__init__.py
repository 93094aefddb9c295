"""CLI commands for applytrack."""

from applytrack.cli.commands import chat, config, documents, explorer, organize, report

__all__ = ["chat", "config", "documents", "explorer", "organize", "report"]
