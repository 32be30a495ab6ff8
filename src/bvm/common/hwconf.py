WORD_SIZE = 4

STACK_SIZE = 0x100          # Operand stack capacity, in words
HEAP_SIZE = 0x1000          # General purpose region, in bytes
GFX_SIZE = 0x400            # Graphics output region, in bytes

SEGMENT_MASK = 0xF000       # Selector nibble of an address
HEAP_SEGMENT = 0x0000
GFX_SEGMENT = 0xA000
IO_SEGMENT = 0xF000         # Reserved: reads 0, discards writes

INT32_MIN = -0x80000000
