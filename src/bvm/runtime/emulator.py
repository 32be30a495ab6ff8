import sys
from pathlib import Path
import logging as lg
import traceback

import click

from bvm.runtime.memmap import MemoryMap
from bvm.runtime.settings import RunSettings
from bvm.runtime.errors import VMError
import bvm.sasm.asm as asm_compiler
import bvm.runtime.cpu as cpu


EXIT_OK = 0
EXIT_VM_ERROR = 2
EXIT_KEYBOARD = 3
EXIT_EXEC_ERROR = 100


def execute(
    code: bytes,
    settings: RunSettings | None = None,
    memory: MemoryMap | None = None
) -> cpu.Interpreter:
    ''' Tick a program until the budget runs out.

    With stop_on_error the first fault propagates as VMError; otherwise
    faults are logged and ticking goes on.
    '''
    if settings is None:
        settings = RunSettings()

    proc = cpu.Interpreter(memory)
    proc.load(code)

    for _ in range(settings.max_ticks):
        if settings.stop_on_error:
            proc.exec_next()
            continue

        status = proc.tick()

        if status != cpu.Status.OK:
            lg.warning(f'{status.name} at tick {proc.ticks}, IP {proc.ip:X}')

    lg.info(f'Tick budget of {settings.max_ticks} exhausted')
    return proc


def read_program(path: Path, asm: bool) -> bytes:
    if not asm:
        return path.read_bytes()

    return asm_compiler.compile_source(path.read_text(), path.stem)


def write_dump(path: Path | None, memory: MemoryMap, region: str):
    if path is None:
        return

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(memory.dump(region))
    lg.info(f'Dumped {region} to {path}')


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('-a', '--asm', is_flag=True, help='Treat ROM as assembly source')
@click.option('-n', '--max-ticks', type=int, help='Number of instructions to execute')
@click.option('--keep-going', is_flag=True, help='Log VM faults and keep ticking')
@click.option('-c', '--config', type=Path, help='TOML file with a [run] table')
@click.option('--dump-heap', type=Path, help='Write the heap region here on exit')
@click.option('--dump-gfx', type=Path, help='Write the graphics region here on exit')
@click.argument('rom_filename', type=Path)
def run(
    verbose: bool,
    asm: bool,
    max_ticks: int | None,
    keep_going: bool,
    config: Path | None,
    dump_heap: Path | None,
    dump_gfx: Path | None,
    rom_filename: Path
):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)
    lg.info("BVM")

    memory = MemoryMap()

    try:
        settings = RunSettings()

        if config is not None:
            settings.load_toml(config)

        # Flags only override the config file when given
        settings.update(
            verbose=True if verbose else None,
            max_ticks=max_ticks,
            stop_on_error=False if keep_going else None
        )

        if settings.verbose:
            lg.getLogger().setLevel(lg.DEBUG)

        code = read_program(rom_filename, asm)
        execute(code, settings, memory)
        exit_code = EXIT_OK

    except VMError as e:
        lg.info(f'Execution halted on {type(e).__name__}: {e}')
        exit_code = EXIT_VM_ERROR

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        exit_code = EXIT_KEYBOARD

    except Exception as e:
        lg.info(f'Execution halted on general error {e}')
        traceback.print_exc()
        sys.exit(EXIT_EXEC_ERROR)

    write_dump(dump_heap, memory, 'heap')
    write_dump(dump_gfx, memory, 'gfx')
    sys.exit(exit_code)


if __name__ == '__main__':
    run()
