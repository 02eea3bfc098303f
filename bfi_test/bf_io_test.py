"""Tests for bfi.bf_io."""

import io
import unittest

from bfi import bf_io

class FailingStream(object):
  def read(self, size):
    raise OSError('read failed')

class ChannelTest(unittest.TestCase):

  def testBufferChannel(self):
    channel = bf_io.BufferChannel(b'ab')
    self.assertEqual([97, 98, None, None],
                     [channel.read_byte() for _ in range(4)])

  def testTextIsEncoded(self):
    channel = bf_io.BufferChannel('\xe9')
    self.assertEqual([0xc3, 0xa9, None],
                     [channel.read_byte() for _ in range(3)])

  def testStreamChannel(self):
    channel = bf_io.StreamChannel(io.BytesIO(b'\x00\xff'))
    self.assertEqual([0, 255, None],
                     [channel.read_byte() for _ in range(3)])

  def testStreamFailurePropagates(self):
    channel = bf_io.StreamChannel(FailingStream())
    with self.assertRaises(OSError):
      channel.read_byte()

  def testEmptyChannel(self):
    self.assertIsNone(bf_io.EmptyChannel().read_byte())

  def testAbstractChannel(self):
    with self.assertRaises(NotImplementedError):
      bf_io.InputChannel().read_byte()

if __name__ == '__main__':
  unittest.main()
