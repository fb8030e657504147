"""
Fixed values for the single-frame APNG layout and the conversion defaults.

Every acTL/fcTL field the converter writes comes from here, so the
single-frame, full-canvas, no-compositing layout is defined in one place.
"""

# =============================================================================
# PNG container
# =============================================================================
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
CHUNK_OVERHEAD = 12       # length (4) + type (4) + CRC (4)
IHDR_LENGTH = 13

BIT_DEPTH = 8
COLOR_TYPE_RGBA = 6       # truecolour with alpha
COMPRESSION_METHOD = 0
FILTER_METHOD = 0
INTERLACE_METHOD = 0

IDAT_CHUNK_SIZE = 1 << 16
COMPRESS_LEVEL = 9        # Max PNG compression

# =============================================================================
# Animation control (acTL)
# =============================================================================
NUM_FRAMES = 1
NUM_PLAYS = 0             # 0 = loop forever (policy, nothing to loop with one frame)
ACTL_LENGTH = 8

# =============================================================================
# Frame control (fcTL)
# =============================================================================
SEQUENCE_NUMBER = 0
X_OFFSET = 0
Y_OFFSET = 0
DELAY_NUM = 1             # 1/100 s (policy, not derived from input)
DELAY_DEN = 100
DISPOSE_OP_NONE = 0
BLEND_OP_SOURCE = 0
FCTL_LENGTH = 26

# Bytes the splicer adds on top of the encoded PNG
APNG_OVERHEAD = 2 * CHUNK_OVERHEAD + ACTL_LENGTH + FCTL_LENGTH

# =============================================================================
# Size budget
# =============================================================================
DEFAULT_BYTE_BUDGET = 5 * 1024 * 1024
SAFETY_MARGIN = 0.9       # applied to the sqrt scale factor
MAX_DOWNSCALE_STEPS = 20
