# type: ignore
import pytest

import bvm.runtime.cpu as cpu
from bvm.runtime.memmap import MemoryMap


@pytest.fixture
def with_memory():
    yield MemoryMap()


@pytest.fixture
def with_interpreter(with_memory):
    yield cpu.Interpreter(with_memory)
