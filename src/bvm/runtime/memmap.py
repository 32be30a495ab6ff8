''' Segmented memory map '''

import logging as lg

from bvm.common.hwconf import (
    WORD_SIZE, HEAP_SIZE, GFX_SIZE,
    SEGMENT_MASK, HEAP_SEGMENT, GFX_SEGMENT
)


def to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


class MemoryMap:
    ''' Heap and graphics regions selected by the address nibble 0xF000.

    The map lives as long as its owner: loading another program does not
    touch it, only clear() does. A word access that crosses the end of a
    region wraps around to the start of the same region.
    '''
    heap: bytearray
    gfx: bytearray

    def __init__(self):
        self.heap = bytearray(HEAP_SIZE)
        self.gfx = bytearray(GFX_SIZE)

    def clear(self):
        lg.debug('Clearing memory map')
        self.heap[:] = bytes(HEAP_SIZE)
        self.gfx[:] = bytes(GFX_SIZE)

    def region(self, address: int) -> bytearray | None:
        segment = address & SEGMENT_MASK

        if segment == HEAP_SEGMENT:
            return self.heap

        if segment == GFX_SEGMENT:
            return self.gfx

        # IO_SEGMENT and unmapped selectors have no backing store
        return None

    @staticmethod
    def write32(region: bytearray, offset: int, value: int):
        mask = len(region) - 1

        for i in range(WORD_SIZE):
            region[(offset + i) & mask] = (value >> (8 * i)) & 0xFF

    @staticmethod
    def read32(region: bytearray, offset: int) -> int:
        mask = len(region) - 1
        value = 0

        for i in range(WORD_SIZE):
            value |= region[(offset + i) & mask] << (8 * i)

        return to_int32(value)

    def store(self, address: int, value: int):
        region = self.region(address)

        if region is None:
            return

        self.write32(region, address & (len(region) - 1), value)

    def load(self, address: int) -> int:
        region = self.region(address)

        if region is None:
            return 0

        return self.read32(region, address & (len(region) - 1))

    def dump(self, name: str) -> bytes:
        regions = {
            'heap': self.heap,
            'gfx': self.gfx
        }

        if name not in regions:
            raise KeyError(f'Unknown region {name}')

        return bytes(regions[name])
