"""
m9312 - M9312 Boot PROM Converter Command-Line Interface
=========================================================

This module implements the command-line interface for converting M9312
Bootstrap/Terminator boot PROM images between PROM programmer hex files,
DEC absolute binary files, and octal dumps.

Usage Examples
--------------
Unscramble a PROM read by a programmer into a loadable binary:
    $ m9312 -u 23-751a9.hex dl.bin

Scramble a binary into a hex file for burning a new PROM:
    $ m9312 -s dl.bin 23-751a9.hex

Show the words held in a PROM:
    $ m9312 -d 23-751a9.hex -

Use '-' for standard input or output.
"""

import io
import logging
from typing import Optional

import click

from m9312_prom import __version__
from m9312_prom.cli.errors import handle_cli_exception
from m9312_prom.config import ConversionConfig, parse_address
from m9312_prom.convert import ConversionMode, run_conversion

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _address_option(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
) -> Optional[int]:
    if value is None:
        return None
    try:
        return parse_address(value)
    except ValueError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(dir_okay=False, allow_dash=True),
)
@click.argument(
    "output_file",
    type=click.Path(dir_okay=False, allow_dash=True),
)
@click.option(
    "-u", "--unscramble", "mode",
    flag_value=ConversionMode.UNSCRAMBLE.name,
    help="Unscramble PROM hex file into DEC absolute binary",
)
@click.option(
    "-s", "--scramble", "mode",
    flag_value=ConversionMode.SCRAMBLE.name,
    help="Scramble DEC absolute binary file into PROM hex file",
)
@click.option(
    "-d", "--dump", "mode",
    flag_value=ConversionMode.DUMP.name,
    help="Unscramble PROM hex file into octal dump",
)
@click.option(
    "--origin",
    callback=_address_option,
    default=None,
    help="Bus address of the first ROM word, octal unless prefixed (default: 173000)",
)
@click.option(
    "--transfer",
    callback=_address_option,
    default=None,
    help="Transfer address for binary output (default: same as origin)",
)
@click.option(
    "--leader",
    type=click.IntRange(min=0),
    default=None,
    help="Null bytes before the first binary record (default: 0)",
)
@click.option(
    "--interrecord",
    type=click.IntRange(min=0),
    default=None,
    help="Null bytes after each binary data record (default: 0)",
)
@click.option(
    "--trailer",
    type=click.IntRange(min=0),
    default=None,
    help="Null bytes after the binary end record (default: 0)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="m9312")
def main(
    input_file: str,
    output_file: str,
    mode: Optional[str],
    origin: Optional[int],
    transfer: Optional[int],
    leader: Optional[int],
    interrecord: Optional[int],
    trailer: Optional[int],
    verbose: bool,
) -> None:
    """
    Convert DEC M9312 boot PROM images.

    Exactly one of -u, -s or -d selects the conversion. INPUT_FILE and
    OUTPUT_FILE may be '-' for standard input and output.

    \b
    Examples:
      m9312 -u 23-751a9.hex dl.bin
      m9312 -s dl.bin 23-751a9.hex
      m9312 -d 23-751a9.hex -
    """
    setup_logging(verbose)

    if mode is None:
        raise click.UsageError("one of -u, -s or -d is required")
    conversion = ConversionMode[mode]

    try:
        config = ConversionConfig.from_env().with_overrides(
            origin=origin,
            transfer_address=transfer,
            leader=leader,
            interrecord=interrecord,
            trailer=trailer,
        )
    except ValueError as e:
        handle_cli_exception(click.BadParameter(f"invalid environment setting: {e}"))

    try:
        config.validate()
    except ValueError as e:
        handle_cli_exception(click.BadParameter(str(e), param_hint="'--origin'"))

    # Hex files may carry programmer banners in any 8-bit encoding
    encoding = "latin-1" if "b" not in conversion.input_mode else None

    try:
        inf = click.open_file(input_file, conversion.input_mode, encoding=encoding)
    except OSError as e:
        handle_cli_exception(e, verbose, "Input")

    # The output file is only created once the whole conversion has succeeded
    buffer = io.BytesIO() if "b" in conversion.output_mode else io.StringIO()
    with inf:
        try:
            run_conversion(conversion, inf, buffer, config)
        except Exception as e:
            handle_cli_exception(e, verbose, conversion.name.capitalize())

    try:
        with click.open_file(output_file, conversion.output_mode) as outf:
            outf.write(buffer.getvalue())
    except OSError as e:
        handle_cli_exception(e, verbose, "Output")

    logger.debug("Conversion complete")


if __name__ == "__main__":
    main()
