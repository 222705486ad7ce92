"""PKZ audio protocol constants.

Single source of truth for the on-disk markers the extractor scans for.
Extractor and Verifier must remain synchronized.
"""

# Embedded audio record magic (big-endian RIFF)
MAGIC_WEM_REC = b"RIFX"
MAGIC_LEN = 4

# Trailing padding word that terminates a record
PAD_WORD = b"\x00\x00\x00\x00"
PAD_STRIDE = 4

# Zero words closer than this to the record start sit inside the header
MIN_PAYLOAD_LEN = 0xDD  # 221 bytes

# Naming
WEM_SUFFIX = ".wem"
WAV_SUFFIX = ".wav"
DEFAULT_NAME = "Untitled" + WEM_SUFFIX
NAME_REQUIRED_CHAR = "_"

# Output layout
INDEX_FILE = "index.parquet"

# External decoder
DEFAULT_DECODER = "vgmstream-cli"
DECODER_ENVVAR = "PKZ_DECODER"
