import pytest
from click.testing import CliRunner

import bvm.runtime.emulator as emulator
from bvm.runtime.errors import StackOverflow, StackUnderflow
from bvm.runtime.memmap import MemoryMap
from bvm.runtime.settings import RunSettings
import bvm.sasm.masm as masm
import bvm.sasm.disasm as disasm

from unit_utils import find_file, assemble_file


def test_execute_runs_budget():
    settings = RunSettings().update(max_ticks=25)
    proc = emulator.execute(assemble_file('programs/sum.sasm'), settings)

    assert proc.ticks == 25


def test_execute_stops_on_error():
    code = assemble_file('emulator/overflow.sasm')

    with pytest.raises(StackOverflow):
        emulator.execute(code, RunSettings().update(max_ticks=10000))


def test_execute_keeps_going(caplog):
    settings = RunSettings().update(max_ticks=10, stop_on_error=False)

    with caplog.at_level('WARNING'):
        proc = emulator.execute(bytes([0x01]), settings)

    assert proc.ticks == 10
    assert 'STACK_UNDERFLOW' in caplog.text


def test_execute_uses_given_memory():
    memory = MemoryMap()
    emulator.execute(assemble_file('programs/sum.sasm'), RunSettings().update(max_ticks=200), memory)

    assert memory.load(0x0010) == 55


def test_settings_from_toml(tmp_path):
    config = tmp_path / 'run.toml'
    config.write_text('[run]\nmax_ticks = 3\nstop_on_error = false\n')
    settings = RunSettings().load_toml(config)

    assert settings.max_ticks == 3
    assert settings.stop_on_error is False
    assert settings.verbose is False


def test_settings_reject_negative_budget():
    with pytest.raises(ValueError):
        RunSettings().update(max_ticks=-1)


def test_run_binary(tmp_path):
    rom = tmp_path / 'sum.bin'
    rom.write_bytes(assemble_file('programs/sum.sasm'))
    heap = tmp_path / 'out' / 'heap.bin'

    result = CliRunner().invoke(emulator.run, ['-n', '200', '--dump-heap', str(heap), str(rom)])

    assert result.exit_code == emulator.EXIT_OK
    assert heap.read_bytes()[0x10:0x14] == bytes([55, 0, 0, 0])


def test_run_source_with_gfx_dump(tmp_path):
    gfx = tmp_path / 'gfx.bin'
    source = str(find_file('programs/gfx_fill.sasm'))

    result = CliRunner().invoke(emulator.run, ['--asm', '-n', '4000', '--dump-gfx', str(gfx), source])

    assert result.exit_code == emulator.EXIT_OK
    data = gfx.read_bytes()
    assert len(data) == 1024
    assert data[4 * 7:4 * 8] == bytes([7, 0, 0, 0])


def test_run_vm_error_exit_code(tmp_path):
    source = str(find_file('emulator/overflow.sasm'))
    result = CliRunner().invoke(emulator.run, ['--asm', '-n', '10000', source])

    assert result.exit_code == emulator.EXIT_VM_ERROR


def test_run_keep_going(tmp_path):
    source = str(find_file('emulator/overflow.sasm'))
    result = CliRunner().invoke(emulator.run, ['--asm', '-n', '1000', '--keep-going', source])

    assert result.exit_code == emulator.EXIT_OK


def test_run_config_file(tmp_path):
    rom = tmp_path / 'pop.bin'
    rom.write_bytes(bytes([0x01]))
    config = tmp_path / 'run.toml'
    config.write_text('[run]\nstop_on_error = false\n')

    result = CliRunner().invoke(emulator.run, ['-c', str(config), '-n', '5', str(rom)])
    assert result.exit_code == emulator.EXIT_OK

    result = CliRunner().invoke(emulator.run, ['-n', '5', str(rom)])
    assert result.exit_code == emulator.EXIT_VM_ERROR


def test_run_missing_file(tmp_path):
    result = CliRunner().invoke(emulator.run, [str(tmp_path / 'nope.bin')])
    assert result.exit_code == emulator.EXIT_EXEC_ERROR


def test_masm_and_disasm(tmp_path):
    binary = tmp_path / 'sum.bin'
    source = str(find_file('programs/sum.sasm'))

    result = CliRunner().invoke(masm.compile, [source, str(binary)])
    assert result.exit_code == 0
    assert binary.read_bytes() == assemble_file('programs/sum.sasm')

    result = CliRunner().invoke(disasm.disasm, [str(binary)])
    assert result.exit_code == 0
    assert result.output.splitlines()[0] == '0x0000\tpush8\t0x0'


def test_masm_reports_errors(tmp_path):
    source = tmp_path / 'bad.sasm'
    source.write_text('frob\n')

    result = CliRunner().invoke(masm.compile, [str(source), str(tmp_path / 'bad.bin')])

    assert result.exit_code == 1
    assert not (tmp_path / 'bad.bin').exists()


def test_execute_underflow_propagates():
    with pytest.raises(StackUnderflow):
        emulator.execute(bytes([0x01]))


def test_settings_reject_non_integer_budget():
    with pytest.raises(TypeError):
        RunSettings().update(max_ticks='10')


def test_run_bad_config_exit_code(tmp_path):
    rom = tmp_path / 'nop.bin'
    rom.write_bytes(bytes([0xFF]))
    config = tmp_path / 'run.toml'
    config.write_text('[run\nmax_ticks = \n')

    result = CliRunner().invoke(emulator.run, ['-c', str(config), str(rom)])
    assert result.exit_code == emulator.EXIT_EXEC_ERROR

    config.write_text('[run]\nmax_ticks = "many"\n')
    result = CliRunner().invoke(emulator.run, ['-c', str(config), str(rom)])
    assert result.exit_code == emulator.EXIT_EXEC_ERROR

    result = CliRunner().invoke(emulator.run, ['-c', str(tmp_path / 'missing.toml'), str(rom)])
    assert result.exit_code == emulator.EXIT_EXEC_ERROR


def test_run_negative_budget_exit_code(tmp_path):
    rom = tmp_path / 'nop.bin'
    rom.write_bytes(bytes([0xFF]))

    result = CliRunner().invoke(emulator.run, ['-n', '-1', str(rom)])

    assert result.exit_code == emulator.EXIT_EXEC_ERROR
