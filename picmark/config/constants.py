"""Constants for picmark."""

# Default paths
DEFAULT_LOG_DIR = ".logs"
DEFAULT_CONFIG_FILE = "picmark.yaml"

# Local PicGo server upload route
DEFAULT_UPLOAD_ENDPOINT = "http://127.0.0.1:36677/upload"
DEFAULT_UPLOAD_TIMEOUT = 60.0

# Output naming: "{base}{separator}{unix_timestamp}.{ext}"
DEFAULT_OUTPUT_SEPARATOR = " - "

# Document suffixes picked up when a directory is given
DOCUMENT_EXTENSIONS = {".md", ".markdown"}
