"""Byte input channels for the `,` instruction.

A channel hands out one byte per `read_byte()` call and returns None once it
is exhausted. Hard failures surface as OSError.
"""

class InputChannel():
  def read_byte(self):
    raise NotImplementedError

class EmptyChannel(InputChannel):
  def read_byte(self):
    return None

class BufferChannel(InputChannel):
  def __init__(self, data=b''):
    if isinstance(data, str):
      data = data.encode('utf-8')
    self.data = bytes(data)
    self.position = 0

  def read_byte(self):
    if self.position >= len(self.data):
      return None
    byte = self.data[self.position]
    self.position += 1
    return byte

class StreamChannel(InputChannel):
  """Reads from a binary file object, e.g. sys.stdin.buffer.

  Blocks until the stream yields a byte or reports end of file.
  """

  def __init__(self, stream):
    self.stream = stream

  def read_byte(self):
    chunk = self.stream.read(1)
    if not chunk:
      return None
    return chunk[0]
