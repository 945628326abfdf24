"""Default values shared by the core graph components."""

DEFAULT_HISTORY_LIMIT = 50
INITIAL_VERSION = "1.0.0"
DEFAULT_AUTHOR = "system"
DEFAULT_DOCUMENT_NAME = "Project Dependency Graph"
