APP_VERSION = "1.0.0"
APP_NAME = "JsonLens"

RUNTIME_DIR_NAME = "JsonLens"
PREFERENCES_FILENAME = "preferences.json"
LEGACY_PREFERENCES_FILENAME = ".jsonlens_preferences.json"
PREFERENCES_VERSION = "1.0.0"

DIAG_LOG_MAX_BYTES = 512 * 1024
DIAG_LOG_KEEP_BYTES = 256 * 1024
DIAG_LOG_FILENAME = "jsonlens_diagnostics.log"
DIAG_LOG_CONTEXT_LINES = 2

OPERATION_LOG_FILENAME = "operations.log"
OPERATION_LOG_MAX_BYTES = 5 * 1024 * 1024
OPERATION_LOG_KEEP_BYTES = 2 * 1024 * 1024

# Structural traversal is skipped above this UTF-8 size to keep typing responsive.
METRICS_STRUCTURE_MAX_BYTES = 1024 * 1024
METRICS_DEFAULT_MAX_DEPTH = 100

# Reference collaborator input ceiling.
VALIDATOR_MAX_INPUT_BYTES = 5 * 1024 * 1024

ERROR_CONTEXT_LINES_DEFAULT = 2
LIVE_FEEDBACK_DELAY_MS_DEFAULT = 500

FORMAT_INDENT_CHOICES = (2, 4)
FORMAT_INDENT_DEFAULT = 2
FORMAT_TRAILING_NEWLINE_DEFAULT = True

THEME_CHOICES = ("system", "light", "dark")
THEME_DEFAULT = "system"

FONT_SIZE_MIN = 6
FONT_SIZE_MAX = 32
FONT_SIZE_DEFAULT = 12

ERROR_LINE_TAG = "json_error_line"

# Snippet image palette (code snippet export for issue reports).
SNIPPET_PALETTES = {
    "dark": {
        "bg": (17, 22, 31),
        "fg": (214, 222, 235),
        "gutter_fg": (110, 124, 145),
        "error_bg": (92, 28, 36),
        "error_fg": (255, 214, 214),
        "marker_fg": (255, 110, 110),
    },
    "light": {
        "bg": (250, 250, 250),
        "fg": (33, 37, 41),
        "gutter_fg": (134, 142, 150),
        "error_bg": (255, 224, 224),
        "error_fg": (120, 20, 20),
        "marker_fg": (201, 42, 42),
    },
}
