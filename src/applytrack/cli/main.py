"""Main CLI entry point for applytrack."""  # pragma: no cover

from applytrack.cli.app import app  # pragma: no cover

# Register commands
from applytrack.cli.commands import (  # noqa: F401  # pragma: no cover
    chat,
    config,
    documents,
    explorer,
    organize,
    report,
)


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
