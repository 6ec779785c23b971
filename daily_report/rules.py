"""
Fixed pipeline rules.

These are personal conventions baked into the tool, not user configuration.
User-configurable exclusions live in exclusions.py.
"""

TARGET_ENCODING = "utf-8"

# A report day runs from 07:00 to 06:59:59.999 the next calendar day.
HOUR_OFFSET = 7
HOUR_OFFSET_MS = HOUR_OFFSET * 60 * 60 * 1000

# Slack channels with this prefix are personal logs and never reported.
TIMES_CHANNEL_PREFIX = "times-"

# Icon fonts put glyphs in the BMP private use area; they are ignored in title matching.
PRIVATE_USE_START = 0xE000
PRIVATE_USE_END = 0xF8FF

NOTION_BASE_URL = "https://www.notion.so/"
