# type: ignore
import pytest

from regvm.runtime.cpu import CPU


@pytest.fixture
def with_cpu():
    yield CPU()


@pytest.fixture
def with_rom(tmp_path):
    def write(binary: bytes):
        path = tmp_path / 'rom.bin'
        path.write_bytes(binary)
        return path

    yield write
