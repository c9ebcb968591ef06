"""Protocol constants.

Operation codes are part of the wire contract for Tyrant protocol 0.91
(servers 1.1.23 and later); keep these in one place to avoid numeric
literals drifting through the encoder.
"""

PUT = 0xC810
PUTKEEP = 0xC811
PUTCAT = 0xC812
PUTSHL = 0xC813
PUTNR = 0xC818
OUT = 0xC820
GET = 0xC830
MGET = 0xC831
VSIZ = 0xC838
ITERINIT = 0xC850
ITERNEXT = 0xC851
FWMKEYS = 0xC858
ADDINT = 0xC860
ADDDOUBLE = 0xC861
EXT = 0xC868
SYNC = 0xC870
OPTIMIZE = 0xC871
VANISH = 0xC872
COPY = 0xC873
RESTORE = 0xC874
SETMST = 0xC878
RNUM = 0xC880
SIZE = 0xC881
STAT = 0xC888
MISC = 0xC890

# misc() option: do not write the call to the update log.
MONOULOG = 1 << 0

# ext() options: record and global locking.
XOLCKREC = 1 << 0
XOLCKGLB = 1 << 1

# Integer values below this limit are sent in the fixed 4-byte form.
INTEGER_LIMIT = 1 << 32

# Reverse lookup for log messages.
names = dict((value, name) for name, value in tuple(globals().items())
             if name.isupper() and isinstance(value, int) and value >> 8 == 0xC8)
