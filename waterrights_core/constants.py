# waterrights_core/constants.py
# Wire-level names shared with every other client of the same contract.
# Changing any of these orphans existing data.

INDEX_KEY = "water_rights_keys"
RECORD_KEY_PREFIX = "water_right_"
RECORD_ID_PREFIX = "water-"

ENCODED_MARKER = "FHE-"

DEFAULT_DURATION_DAYS = 30
PUBLIC_KEY_HEX_LEN = 2000

MSG_REJECTED = "Transaction rejected by user"
MSG_NOT_FOUND = "Water right not found"
MSG_NOT_CONNECTED = "Please connect wallet first"
