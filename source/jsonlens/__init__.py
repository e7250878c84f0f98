"""JSON diagnostic and metrics engine for text-editor style JSON tools."""

from jsonlens.core.constants import APP_VERSION

__version__ = APP_VERSION
