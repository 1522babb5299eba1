## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# loxi — A tree-walking interpreter for Lox, a small dynamically-typed scripting language.
#

import sys
import time
from dataclasses import dataclass

import click

from .errors import LoxError, LoxLexicalError, LoxParseError, LoxIncompleteParse, LoxResolveError, LoxRuntimeError
from .formatting import write_without_ansi, format_source_context, format_node, stringify
from .runtime import Runtime


EXIT_STATIC_ERROR = 65
EXIT_NO_INPUT = 66
EXIT_RUNTIME_ERROR = 70


@dataclass(frozen=True)
class RuntimeConfig:
    verbose: int
    stats: bool
    plain: bool


class LoxRunner:
    def __init__(self, config: RuntimeConfig):
        self.verbose = config.verbose
        self.stats_enabled = config.stats
        self.plain = config.plain

        if self.plain:
            writer = write_without_ansi(sys.stdout.write)
            sys.stdout.write, sys.stderr.write = writer, writer

        self.pending: list[LoxError] = []
        self.total_stats = {'steps': 0, 'start': time.time()} if self.stats_enabled else None
        self.runtime = Runtime(verbosity=self.verbose, stats=self.total_stats, on_error=self.pending.append)
        self.status = 0
        self.executed_items = 0

    def _fatal_error(self, message: str, errors: list[LoxError], filename: str, source: str, status: int) -> None:
        print(f'\033[30;43m {message} \033[0m Running `\033[97m{filename}\033[0m` caused a problem!', file=sys.stderr)
        for exc in errors:
            print(f'\033[1;97m{exc}\033[0m', file=sys.stderr)
            if source and exc.line > 0:
                print(format_source_context(filename, source, exc.line), file=sys.stderr)
        self.status = self.status or status

    def _handle_exception(self, exc: Exception, filename: str, source: str, is_repl: bool = False) -> bool:
        """Report a failure, returning True only when the REPL should keep reading more input."""
        errors, self.pending = self.pending or [exc], []

        if isinstance(exc, LoxParseError) and is_repl and any(isinstance(e, LoxIncompleteParse) for e in errors):
            return True
        if isinstance(exc, LoxResolveError):
            self._fatal_error("RESOLUTION ERROR.", errors, filename, source, EXIT_STATIC_ERROR)
        elif isinstance(exc, (LoxLexicalError, LoxParseError)):
            self._fatal_error("SYNTAX ERROR.", errors, filename, source, EXIT_STATIC_ERROR)
        elif isinstance(exc, LoxRuntimeError):
            self._fatal_error("RUNTIME ERROR.", [exc], filename, source, EXIT_RUNTIME_ERROR)
        elif isinstance(exc, RecursionError):
            self._fatal_error("RUNTIME ERROR.", [LoxRuntimeError("Stack overflow.")], filename, source, EXIT_RUNTIME_ERROR)
        else:
            raise exc
        return False

    def execute_script(self, source: str, filename: str, print_result: bool = False) -> None:
        try:
            result = self.runtime.run(source)
            if print_result and result is not None:
                print(stringify(result))
        except (LoxError, RecursionError) as exc:
            self._handle_exception(exc, filename, source)
        else:
            self.executed_items += 1

    def tokenize(self, source: str, filename: str) -> None:
        tokens = self.runtime.tokenize(source)
        for exc in tokens.errors:
            print(f'\033[1;97m{exc}\033[0m', file=sys.stderr)
        for token in tokens:
            print(token)
        if tokens.had_error:
            self.status = EXIT_STATIC_ERROR

    def parse(self, source: str, filename: str) -> None:
        try:
            print(format_node(self.runtime.parse_expression(source)))
        except LoxError as exc:
            self._handle_exception(exc, filename, source)

    def evaluate(self, source: str, filename: str) -> None:
        try:
            print(stringify(self.runtime.evaluate(source)))
        except (LoxError, RecursionError) as exc:
            self._handle_exception(exc, filename, source)

    def repl(self) -> None:
        if sys.platform != "win32": import readline

        print('loxi - Lox interpreter REPL; type Ctrl+C to exit.')
        source = ""

        while True:
            try:
                prompt = "\033[36m<<< \033[0m" if not source.strip() else "\033[36m... \033[0m"
                line = input(prompt)
                if len(line.strip()) == 0 and not source: continue
                if line.strip() in ('quit', 'exit') and not source: break
                source += line + "\n"

                try:
                    result = self.runtime.run(source)
                    if result is not None: print("\033[90m>>>\033[0m", stringify(result))
                    source = ""
                except (LoxError, RecursionError) as exc:
                    if not self._handle_exception(exc, '<REPL>', source, is_repl=True):
                        source = ""
                self.status = 0

            except (KeyboardInterrupt, EOFError):
                print(""); break

    def finalize(self) -> int:
        if self.total_stats and self.executed_items > 0:
            elapsed_time = time.time() - self.total_stats['start']
            print(f"\n\033[97m\033[48;5;30m STATISTICS. \033[0m")
            print(f"step\t\033[97m{self.total_stats['steps']:,}\033[0m")
            print(f"time\t\033[97m{elapsed_time:.3f}s\033[0m")
        return self.status


def _inline_command_source(command: str) -> str:
    source = command.rstrip()
    if not source.endswith((';', '}')):
        source += ';'
    return source + '\n'


@click.group(invoke_without_command=True)
@click.option('--verbose', '-v', default=0, count=True, help='Trace executed statements (-v top-level, -vv all).')
@click.option('--stats', is_flag=True, help='Display execution statistics (e.g., number of steps).')
@click.option('--plain', '-p', is_flag=True, help='Strip ANSI color codes and redirect stderr to stdout.')
@click.pass_context
def cli(ctx: click.Context, verbose: int, stats: bool, plain: bool) -> None:
    ctx.ensure_object(dict)
    ctx.obj['config'] = RuntimeConfig(verbose=verbose, stats=stats, plain=plain)


def _read_script(script) -> str:
    try:
        return script.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise click.exceptions.Exit(EXIT_NO_INPUT) from exc


@cli.command('tokenize')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def tokenize(ctx: click.Context, script) -> None:
    runner = LoxRunner(ctx.obj['config'])
    runner.tokenize(_read_script(script), script.name or '<STDIN>')
    ctx.exit(runner.finalize())


@cli.command('parse')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def parse(ctx: click.Context, script) -> None:
    runner = LoxRunner(ctx.obj['config'])
    runner.parse(_read_script(script), script.name or '<STDIN>')
    ctx.exit(runner.finalize())


@cli.command('evaluate')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def evaluate(ctx: click.Context, script) -> None:
    runner = LoxRunner(ctx.obj['config'])
    runner.evaluate(_read_script(script), script.name or '<STDIN>')
    ctx.exit(runner.finalize())


@cli.command('run')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def run_file(ctx: click.Context, script) -> None:
    runner = LoxRunner(ctx.obj['config'])
    runner.execute_script(_read_script(script), script.name or '<STDIN>')
    ctx.exit(runner.finalize())


@cli.command('command')
@click.argument('source')
@click.pass_context
def run_command(ctx: click.Context, source: str) -> None:
    runner = LoxRunner(ctx.obj['config'])
    runner.execute_script(_inline_command_source(source), '<INPUT>', print_result=True)
    ctx.exit(runner.finalize())


@cli.command('repl')
@click.pass_context
def run_repl(ctx: click.Context) -> None:
    runner = LoxRunner(ctx.obj['config'])
    runner.repl()
    ctx.exit(runner.finalize())


def main(argv: list[str] | None = None) -> None:
    a = list(sys.argv[1:] if argv is None else argv)
    g = [t for t in a if t in ('--stats', '--plain', '-p', '--verbose') or (t.startswith('-v') and set(t[1:]) == {'v'})]
    r = [t for t in a if t not in g]

    if len(r) == 0:
        # No args: if stdin has data, treat as file '-', else REPL
        cmd, tail = ('run', ['-']) if not sys.stdin.isatty() else ('repl', [])
    elif r[0] in cli.commands or r[0] in ('--help', '-h'):
        cmd, tail = ('--help' if r[0] == '-h' else r[0]), r[1:]
    elif r[0] in ('-c', '--command'):
        cmd, tail = 'command', r[1:]
    else:
        cmd, tail = 'run', r

    cli.main(args=[*g, cmd, *tail], prog_name='loxi')


if __name__ == "__main__":
    main()
