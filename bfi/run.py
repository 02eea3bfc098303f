import click
import logging
import sys

from pathlib import Path
from importlib_resources import files

import bfi.programs
from bfi import bf
from bfi import bf_io
from bfi.utils import make_config

logger = logging.getLogger('bfi')

def load_source(source):
    """Read a program from a file, falling back to the bundled programs"""
    custom_path = Path(source)
    bundled_path = files(bfi.programs).joinpath(source)

    if custom_path.is_file():
        return custom_path.read_text()
    elif bundled_path.is_file():
        return bundled_path.read_text()
    else:
        err = f"Program {source} not found"
        logger.error(err)
        raise FileNotFoundError(err)

@click.command()
@click.argument('source', required=False, type=str)
@click.option('--code', '-c', help='Run this code instead of a source file')
@click.option('--input-file', '-i', type=click.File('rb'), default='-', help='Feed the program from this file instead of stdin')
@click.option('--tape-length', type=int, help='Number of cells on the tape')
@click.option('--cell-type', type=str, help='numpy integer type of a cell, e.g. uint8 or int32')
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False), help='YAML configuration file')
@click.option('--config-str', help='Configuration overrides like tape_length=30000,cell_type=int32')
@click.option('--debug', is_flag=True, help='Log the interpreter state before every step')
def run(source, code, input_file, tape_length, cell_type, config_file, config_str, debug):
    try:
        config = make_config(config_file, config_str,
                             tape_length=tape_length, cell_type=cell_type,
                             debug=debug or None)
    except ValueError as e:
        raise click.UsageError(str(e))

    logging.basicConfig(format='%(asctime)s %(message)s',
                        level=logging.DEBUG if config['debug'] else logging.INFO)

    if code is not None and source:
        raise click.UsageError('Specify either a source file or --code, not both')

    if code is None:
        if not source:
            raise click.UsageError('No program found. Specify a source file or --code')
        try:
            code = load_source(source)
        except FileNotFoundError as e:
            raise click.BadParameter(str(e), param_hint='SOURCE')

    logger.info('Running brainfuck')
    try:
        executable = bf.Executable(code,
                                   tape_length=config['tape_length'],
                                   cell_type=config['cell_type'],
                                   input_channel=bf_io.StreamChannel(input_file),
                                   output_stream=sys.stdout,
                                   debug=config['debug'])
        executable.execute()
    except bf.BrainfuckError as e:
        logger.error(e)
        sys.exit(1)
    logger.info('Done.')

if __name__ == '__main__':
    run()
