# Magic and layout
PAK_MAGIC = b"PACK"  # 4 bytes, not NUL-terminated

HEADER_SIZE = 12    # magic[4], table_offset u32, table_size u32
ENTRY_SIZE = 64     # name[56], offset u32, size u32
MAX_NAME_LEN = 56

# Offsets and sizes are stored as uint32
MAX_ENTRY_SIZE = 0xFFFFFFFF
MAX_OFFSET = 0xFFFFFFFF


DEFAULT_CHUNK_SIZE = 8192  # 8 KiB
