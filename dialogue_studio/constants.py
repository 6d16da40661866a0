"""All magic numbers and configuration constants."""

# Input markers (case-sensitive, anchored at the start of the trimmed line)
NARRATION_PREFIX = "NARRATION:"
CHOICE_PREFIX = "CHOICE:"
OPTION_PREFIX = "OPTION:"
TARGET_PREFIX = "TARGET:"
END_CHOICE_PREFIX = "END_CHOICE"
HEADER_WORD = "Dialogue"            # "Dialogue:" section headers are never speakers

SCENE_PREFIX = "SCENE_"
SEQUENCE_PREFIX = "SEQUENCE_"
SCENE_DIGITS = 2                    # SCENE_02, never SCENE_2

# Page geometry (px)
PAGE_WIDTH = 1400
MIN_PAGE_HEIGHT = 1200
MASTER_HEADER_HEIGHT = 100
MASTER_HEADER_GAP = 20              # gap between master header and first scene
MASTER_FOOTER_HEIGHT = 60
SCENE_X = 20
SCENE_WIDTH = 1360
SCENE_HEADER_HEIGHT = 80           # slot above the first sequence
SCENE_HEADER_BAR_HEIGHT = 60        # drawn bar inside that slot
SCENE_SPACING = 100                 # vertical gap after each scene frame
SEQUENCE_X = 40
SEQUENCE_WIDTH = 1320
SEQUENCE_HEADER_HEIGHT = 50
SEQUENCE_HEADER_BAR_HEIGHT = 40
SEQUENCE_PADDING = 20
SEQUENCE_SPACING = 20               # added once per sequence in a scene
DIALOGUE_ITEM_HEIGHT = 100          # vertical slot per dialogue node
ITEM_X = 60
ITEM_WIDTH = 1280
ITEM_FRAME_HEIGHT = 90
ITEM_TEXT_INSET = 20
CHOICE_OPTION_SPACING = 25
CHOICE_OPTION_INDENT = 20

# Single-document page geometry (px)
DOC_PAGE_WIDTH = 1200
DOC_MIN_PAGE_HEIGHT = 800
DOC_HEADER_HEIGHT = 80
DOC_CONTAINER_PADDING = 20          # above the first item and below the container
DOC_ITEM_SLOT = 120                 # vertical slot per dialogue node
DOC_ITEM_X = 40
DOC_ITEM_WIDTH = 1120
DOC_FOOTER_HEIGHT = 60
DOC_DESIGN_FILENAME = "dialogue.figma.json"

FONT_FAMILY = "Inter"
BULLET = "•"

# RGBA fills, 0.0–1.0
COLOR_MASTER_HEADER = (0.05, 0.1, 0.3, 1)
COLOR_MASTER_FOOTER = (0.9, 0.9, 0.9, 1)
COLOR_SCENE = (0.98, 0.98, 1, 1)
COLOR_SCENE_HEADER = (0.1, 0.2, 0.4, 1)
COLOR_SEQUENCE = (0.95, 0.95, 0.98, 1)
COLOR_CHARACTER = (0.98, 0.98, 1, 1)
COLOR_NARRATION = (0.95, 0.95, 0.95, 1)
COLOR_CHOICE = (0.95, 0.9, 1, 1)
COLOR_GENERIC = (0.9, 0.9, 0.9, 1)
COLOR_CONTAINER = (1, 1, 1, 1)

# Text styles referenced by fillStyleId
TEXT_STYLE_COLORS = {
    "white-text": (1, 1, 1, 1),
    "character-text": (0.15, 0.39, 0.92, 1),
    "narration-text": (0.42, 0.45, 0.5, 1),
    "choice-text": (0.49, 0.23, 0.91, 1),
    "default-text": (0, 0, 0, 1),
}

STUDIO_NAME = "Dialogue Studio"
DESIGN_FILE_NAME = "Dialogues_with_Figma"
DESIGN_FILE_VERSION = "1.0.0"
DESIGN_SCHEMA_VERSION = 1
DOCUMENT_VERSION = "1.0.0"          # stamped into document metadata
OUTPUT_DIR = "output"
VERSION = "0.1.0"
