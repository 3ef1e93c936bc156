"""
Configuration constants for photo-sword.
"""

# --- File Type Definitions ---
# Glob patterns handed to the scanner's filter (matched case-insensitively)
PHOTO_PATTERNS = ('*.jpg', '*.nef')

# Extension to Slot Mapping
# A photo unit holds at most one file per slot
JPG_SLOT = 'jpg'
RAW_SLOT = 'raw'
EXT_TO_SLOT = {
    '.jpg': JPG_SLOT,
    '.nef': RAW_SLOT,
}
SLOTS = (JPG_SLOT, RAW_SLOT)

# --- Hashing & Performance ---
# 1 keeps the hashing sweep sequential
DEFAULT_WORKERS = 1

# --- Output ---
DEFAULT_OUTPUT = "photo-sword.json"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
