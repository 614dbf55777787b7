"""Frozen constants shared by the subtractive engine and its strategies."""

INT32_MAX = 2**31 - 1
INT32_MIN = -(2**31)
INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)

# Knuth's seed constant, derived from the golden ratio.
MSEED = 161803398

SEED_ARRAY_LENGTH = 56
INEXTP_START = 21
INIT_STRIDE = 21
MIX_OFFSET = 30
MIX_PASSES = 4

UINT64_LOW_BITS = 22
UINT64_MID_BITS = 22
UINT64_HIGH_BITS = 20
