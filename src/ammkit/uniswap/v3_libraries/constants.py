Q96_RESOLUTION = 96
Q96 = 1 << Q96_RESOLUTION
Q128 = 1 << 128

# Fees are expressed in pips, i.e. hundredths of a basis point
FEE_DENOMINATOR = 1_000_000

LIB_CACHE_SIZE = 4096
