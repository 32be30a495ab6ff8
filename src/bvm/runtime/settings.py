from pathlib import Path
import tomllib


class RunSettings:
    verbose: bool
    max_ticks: int
    stop_on_error: bool

    def __init__(self):
        self.verbose = False
        self.max_ticks = 10000
        self.stop_on_error = True

    def update(
        self,
        verbose: bool | None = None,
        max_ticks: int | None = None,
        stop_on_error: bool | None = None
    ):
        if verbose is not None:
            self.verbose = verbose

        if max_ticks is not None:
            if not isinstance(max_ticks, int) or isinstance(max_ticks, bool):
                raise TypeError(f'Tick budget must be an integer, got {max_ticks!r}')

            if max_ticks < 0:
                raise ValueError(f'Tick budget must not be negative, got {max_ticks}')

            self.max_ticks = max_ticks

        if stop_on_error is not None:
            self.stop_on_error = stop_on_error

        return self

    def load_toml(self, path: Path):
        ''' Read overrides from the [run] table of a TOML file '''
        config = tomllib.loads(path.read_text())
        run = config.get('run', {})

        return self.update(
            verbose=run.get('verbose'),
            max_ticks=run.get('max_ticks'),
            stop_on_error=run.get('stop_on_error')
        )
