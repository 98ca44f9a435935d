"""
Configuration constants for the license tagger.
"""
from .models import FieldPolicy

# --- File Type Definitions ---
IMAGE_EXTS = {'.jpg', '.png'}

# None means "use the current working directory" when neither
# --files nor --projectPath is given.
DEFAULT_PROJECT_PATH = None

# --- Metadata Engine ---
# Tag groups requested on every read (all tags plus XMP)
READ_FILTER = ("all", "xmp:all")

# Per-field capability table consulted by the synchronizer.
# License has no reliable standard tag to write, so it only warns.
FIELD_POLICIES = {
    'creator': FieldPolicy(tag='Creator'),
    'license': FieldPolicy(tag='License', writable=False),
    'rights': FieldPolicy(tag='Rights'),
    'author': FieldPolicy(tag='Author'),
    'copyright': FieldPolicy(tag='Copyright'),
}

# Labels used in the console summary, in display order
FIELD_LABELS = {
    'creator': 'Creator',
    'license': 'License',
    'rights': 'Rights',
    'author': 'Author',
    'copyright': 'Copyright',
}

# --- Output ---
LOG_FILENAME = "log.json"
LOG_INDENT = 2          # list form
KEYED_LOG_INDENT = 4    # {sourceFile: record} form
