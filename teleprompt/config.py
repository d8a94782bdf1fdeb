"""Configuration settings for the Teleprompt reader."""

from platformdirs import user_log_dir

# Pace settings (words per minute)
DEFAULT_WPM = 120
MIN_WPM = 30
MAX_WPM = 300
PACE_STEP = 10  # Applied by the pace-up / pace-down keys

# Deck settings
CARD_PREVIEW_LENGTH = 150  # Characters shown before a card preview is truncated

# Logging settings
LOG_DIR = user_log_dir(appname="teleprompt", appauthor=False)
LOG_FILE_NAME = "error.log"

# General settings
SHOW_ERRORS_ON_EXIT = True

# UI settings
UI_UPDATE_INTERVAL = 0.033  # Seconds between repaint checks
UI_COMPLEXITY_MODE = 1  # 0=fullscreen (text only), 1=full panel with status line (default)
PACE_SLIDER_WIDTH = 20  # Cells used by the pace slider in the status line

# Highlighting settings
WORD_HIGHLIGHT_MODE = 1  # 0=off, 1=normal highlighting, 2=standout highlighting

# Keyboard settings
# Can be set to "default", "vim", or a path to a custom keyboard shortcuts JSON file
CUSTOM_KEYBOARD_SHORTCUTS = "default"
