"""
OSC transport for the motion grid system.
Sends motion signals as OSC messages over UDP from a bound local port.
"""

import logging
import socket

from pythonosc.osc_message_builder import OscMessageBuilder

from motiongrid.errors import TransportBindFailure

_LOGGER = logging.getLogger(__name__)


def build_square_message(address, motion_value, max_x, max_y):
  """Build the three-float motion message: motion value, x, y."""
  builder = OscMessageBuilder(address=address)
  for value in (motion_value, max_x, max_y):
    builder.add_arg(float(value), OscMessageBuilder.ARG_TYPE_FLOAT)
  return builder.build()


def build_value_message(address, value):
  """Build a single-float message (elapsed frames / seconds)."""
  builder = OscMessageBuilder(address=address)
  builder.add_arg(float(value), OscMessageBuilder.ARG_TYPE_FLOAT)
  return builder.build()


class OscSender:
  """Connectionless OSC sender bound to a local UDP port."""

  def __init__(self, local_port=8887, dest_host="127.0.0.1", dest_port=8888,
               local_host=""):
    self.local_host = local_host
    self.local_port = local_port
    self.dest_host = dest_host
    self.dest_port = dest_port
    self._sock = None

  @property
  def bound(self):
    return self._sock is not None

  @property
  def local_address(self):
    """(host, port) the socket is bound to, or None before bind()."""
    if self._sock is None:
      return None
    return self._sock.getsockname()

  def bind(self):
    """
    Bind the local UDP port.

    Raises:
        TransportBindFailure: If the socket cannot be created or bound
    """
    sock = None
    try:
      sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
      sock.bind((self.local_host, self.local_port))
    except OSError as e:
      if sock is not None:
        sock.close()
      raise TransportBindFailure(self.local_host or "0.0.0.0", self.local_port, e) from e

    self._sock = sock
    _LOGGER.info("OSC sender bound to %s:%s, sending to %s:%s",
                 self.local_host or "0.0.0.0", self.local_port, self.dest_host, self.dest_port)

  def send(self, message):
    """
    Send a built OSC message.

    Returns:
        bool: False if the datagram could not be sent
    """
    if self._sock is None:
      raise RuntimeError("OscSender.bind() must be called before sending")

    try:
      self._sock.sendto(message.dgram, (self.dest_host, self.dest_port))
    except OSError as e:
      _LOGGER.warning("Failed to send OSC message to %s: %s", message.address, e)
      return False
    return True

  def send_square(self, address, motion_value, max_x, max_y):
    return self.send(build_square_message(address, motion_value, max_x, max_y))

  def send_signal(self, address, signal):
    """Send a MotionSignal as a three-float message."""
    return self.send_square(address, *signal.as_osc_args())

  def send_value(self, address, value):
    return self.send(build_value_message(address, value))

  def close(self):
    if self._sock is not None:
      self._sock.close()
      self._sock = None
