"""applytrack - browse, organize and chat about tracked job applications."""

__version__ = "0.3.0"
