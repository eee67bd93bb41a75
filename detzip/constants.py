# Record signatures
LOCAL_HEADER_SIGNATURE = 0x04034B50   # "PK\x03\x04"
CENTRAL_HEADER_SIGNATURE = 0x02014B50  # "PK\x01\x02"
END_OF_CENTRAL_DIR_SIGNATURE = 0x06054B50  # "PK\x05\x06"

# Version fields (2.0: deflate support)
VERSION_NEEDED = 20
CREATOR_UNIX = 3
VERSION_MADE_BY = (CREATOR_UNIX << 8) | VERSION_NEEDED

# General purpose flags
FLAG_UTF8_NAME = 1 << 11

# Compression method codes
METHOD_STORE = 0
METHOD_DEFLATE = 8

# Regular file, -rw-r--r--
EXTERNAL_ATTR = 0o100644 << 16

# Packed DOS date range
DOS_YEAR_MIN = 1980
DOS_YEAR_MAX = 2107

# Field limits (no ZIP64)
MAX_UINT16 = 0xFFFF
MAX_UINT32 = 0xFFFFFFFF
MAX_PATH_BYTES = MAX_UINT16
MAX_ENTRIES = MAX_UINT16

DEFAULT_DEFLATE_LEVEL = 6
DEFAULT_FINGERPRINT = "sha256"
DEFAULT_RUNS = 2
DEFAULT_ARCHIVE_NAME = "result"
