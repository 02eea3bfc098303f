"""BrainF**k interpreter.

Language info: https://en.wikipedia.org/wiki/Brainfuck

Source text is reduced to a tuple of Instructions, brackets are resolved into
a jump table once, and the program is then interpreted against a fixed-length
tape of numpy integer cells.
"""

from collections import namedtuple
from enum import Enum
import logging

import numpy as np

from bfi.bf_io import EmptyChannel

logger = logging.getLogger(__name__)

DEFAULT_TAPE_LENGTH = 1024
DEFAULT_CELL_TYPE = 'uint8'
NO_JUMP = -1

ExecutionSnapshot = namedtuple(
    'ExecutionSnapshot',
    ['codeptr', 'codechar', 'memptr', 'memval', 'memory'])

class Instruction(Enum):
  MOVE_RIGHT = '>'
  MOVE_LEFT = '<'
  INCREMENT = '+'
  DECREMENT = '-'
  OUTPUT = '.'
  INPUT = ','
  LOOP_START = '['
  LOOP_END = ']'

  def __str__(self):
    return self.value

SYMBOLS = frozenset(instruction.value for instruction in Instruction)

class Result(object):
  SUCCESS = 'success'
  MEMORY_OVERFLOW = 'memory-overflow'
  MEMORY_UNDERFLOW = 'memory-underflow'
  IO_ERROR = 'io-error'
  INTERNAL_ERROR = 'internal-error'

class State(object):
  NOT_STARTED = 'not-started'
  EXECUTING = 'executing'
  FINISHED = 'finished'

class BrainfuckError(Exception):
  pass

class BracketError(BrainfuckError):
  """The program's loop brackets do not pair up"""

class UnbalancedBracketsError(BracketError):
  def __init__(self, position):
    super().__init__(f'Unbalanced brackets: loop end at {position} has no matching loop start')
    self.position = position

class MissingClosedBracketError(BracketError):
  def __init__(self, positions):
    positions = list(positions)
    super().__init__(f'Missing closed bracket for loop start at {", ".join(map(str, positions))}')
    self.positions = positions

class ExecutionError(BrainfuckError):
  """Fatal condition raised while the program was running"""
  result = None

  def __init__(self, message, codeptr, output=''):
    super().__init__(f'{message} (instruction {codeptr})')
    self.codeptr = codeptr
    self.output = output

class MemoryOverflowError(ExecutionError):
  result = Result.MEMORY_OVERFLOW

class MemoryUnderflowError(ExecutionError):
  result = Result.MEMORY_UNDERFLOW

class InputError(ExecutionError):
  result = Result.IO_ERROR

class OutputError(ExecutionError):
  result = Result.IO_ERROR

class JumpTableError(BrainfuckError):
  """The jump table has no target for a bracket. Never raised for a program
  that went through buildbracemap."""

  def __init__(self, codeptr):
    super().__init__(f'No jump target for instruction {codeptr}')
    self.codeptr = codeptr

class ProgramFinishedError(BrainfuckError):
  def __init__(self, program_result):
    super().__init__(f'Trying to step a program that has finished with {program_result}')
    self.result = program_result

def tokenize(code):
  """Keep the eight BF symbols of `code`, in order. Anything else is a comment."""
  return tuple(Instruction(char) for char in code if char in SYMBOLS)

def buildbracemap(program):
  """Build jump map.

  Args:
    program: Sequence of Instructions.

  Returns:
    bracemap: integer array as long as the program. Positions of loop start
        and loop end instructions hold the position of their matching
        counterpart, all other positions hold NO_JUMP.

  Raises:
    UnbalancedBracketsError: a loop end has no loop start before it.
    MissingClosedBracketError: one or more loop starts are never closed.
  """
  bracestack = []
  bracemap = np.full(len(program), NO_JUMP, dtype=np.intp)

  for position, instruction in enumerate(program):
    if instruction is Instruction.LOOP_START:
      bracestack.append(position)
    elif instruction is Instruction.LOOP_END:
      if not bracestack:
        raise UnbalancedBracketsError(position)
      start = bracestack.pop()
      bracemap[start] = position
      bracemap[position] = start

  if bracestack:
    raise MissingClosedBracketError(bracestack)

  bracemap.setflags(write=False)
  return bracemap

def format_snapshot(snapshot):
  cells = ', '.join(f'{idx}: {val}' for idx, val in snapshot.memory.items())
  return (f'next={snapshot.codechar} ip={snapshot.codeptr} '
          f'dp={snapshot.memptr} cells={{{cells}}}')

class Executable():
  def __init__(self, code, tape_length=DEFAULT_TAPE_LENGTH,
               cell_type=DEFAULT_CELL_TYPE, input_channel=None,
               output_stream=None, debug=False, keep_trace=False):
    if isinstance(tape_length, bool) or not isinstance(tape_length, int) or tape_length < 1:
      raise ValueError(f'Tape length must be a positive integer, got {tape_length!r}')
    self.cell_type = np.dtype(cell_type)
    if not np.issubdtype(self.cell_type, np.integer):
      raise ValueError(f'Cells must be integers, got {self.cell_type}')

    self.code = code
    self.program = tokenize(code)
    self.bracemap = buildbracemap(self.program)

    self.tape_length = tape_length
    self.input_channel = input_channel if input_channel is not None else EmptyChannel()
    self.output_stream = output_stream
    self.debug = debug
    self.keep_trace = keep_trace

    self.init()

  def init(self):
    self.program_trace = [] if self.keep_trace else None
    self.codeptr, self.cellptr = 0, 0
    self.cells = np.zeros(self.tape_length, dtype=self.cell_type)
    self.output = []
    self.state = State.NOT_STARTED
    self.result = None

  def read(self):
    return int(self.cells[self.cellptr])

  def write(self, byte):
    # Assign through an array so a byte wraps into narrow signed cells
    self.cells[self.cellptr:self.cellptr + 1] = np.array([byte], dtype=np.uint8).astype(self.cell_type)

  def nonzero_cells(self):
    return {int(idx): int(self.cells[idx]) for idx in np.flatnonzero(self.cells)}

  def record_snapshot(self, instruction):
    if self.debug or self.keep_trace:
      snapshot = ExecutionSnapshot(
          codeptr=self.codeptr, codechar=str(instruction), memptr=self.cellptr,
          memval=self.read(), memory=self.nonzero_cells())
      if self.keep_trace:
        self.program_trace.append(snapshot)
      if self.debug:
        logger.debug(format_snapshot(snapshot))

  def jump(self):
    target = self.bracemap[self.codeptr]
    if target == NO_JUMP:
      self.fail(Result.INTERNAL_ERROR)
      raise JumpTableError(self.codeptr)
    self.codeptr = int(target)

  def emit(self, char):
    if self.output_stream is not None:
      try:
        self.output_stream.write(char)
        self.output_stream.flush()
      except (OSError, ValueError) as e:
        self.halt(OutputError, f'Output failed: {e}')
    self.output.append(char)

  def fail(self, result):
    self.state = State.FINISHED
    self.result = result

  def halt(self, error_type, message):
    error = error_type(message, self.codeptr, ''.join(self.output))
    self.fail(error.result)
    raise error

  def step(self):
    if self.state == State.FINISHED:
      raise ProgramFinishedError(self.result)

    self.state = State.EXECUTING

    if self.codeptr >= len(self.program):
      self.state = State.FINISHED
      self.result = Result.SUCCESS
      return

    instruction = self.program[self.codeptr]
    self.record_snapshot(instruction)

    if instruction is Instruction.MOVE_RIGHT:
      if self.cellptr + 1 >= self.tape_length:
        self.halt(MemoryOverflowError, 'Memory overflow')
      self.cellptr += 1

    elif instruction is Instruction.MOVE_LEFT:
      if self.cellptr == 0:
        self.halt(MemoryUnderflowError, 'Memory underflow')
      self.cellptr -= 1

    elif instruction is Instruction.INCREMENT:
      self.cells[self.cellptr:self.cellptr + 1] += 1

    elif instruction is Instruction.DECREMENT:
      self.cells[self.cellptr:self.cellptr + 1] -= 1

    elif instruction is Instruction.OUTPUT:
      value = self.read()
      try:
        char = chr(value)
      except (ValueError, OverflowError):
        char = None
        logger.debug(f'Cell value {value} is not a code point, nothing printed')
      if char is not None:
        self.emit(char)

    elif instruction is Instruction.INPUT:
      try:
        byte = self.input_channel.read_byte()
      except OSError as e:
        self.halt(InputError, f'Input failed: {e}')
      if byte is not None:
        self.write(byte)

    elif instruction is Instruction.LOOP_START:
      if self.read() == 0: self.jump()

    elif instruction is Instruction.LOOP_END:
      if self.read() != 0: self.jump()

    else:
      self.fail(Result.INTERNAL_ERROR)
      raise BrainfuckError(f'Unknown instruction {instruction!r}')

    self.codeptr += 1

  def execute(self):
    self.step()

    while self.state == State.EXECUTING:
      self.step()

    return ''.join(self.output)

def run(code, **kwargs):
  return Executable(code, **kwargs).execute()
