"""
Socket streams for Logstash tcp/udp inputs.
"""

import logging
import socket
from typing import Tuple

from logstash_hook.errors import ConfigError

logger = logging.getLogger(__name__)

PROTOCOLS = ('tcp', 'udp')


def parse_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` into its parts"""
    host, sep, port = address.strip().rpartition(':')
    if not sep or not host:
        raise ConfigError(f"Invalid address: {address!r}. Expected host:port")
    try:
        port_num = int(port)
    except ValueError:
        raise ConfigError(f"Invalid port in address: {address!r}") from None
    if not 0 < port_num < 65536:
        raise ConfigError(f"Port out of range in address: {address!r}")
    return host.strip('[]'), port_num


class SocketStream:
    """Writes each payload to a connected socket"""

    def __init__(self, sock: socket.socket, protocol: str):
        self.sock = sock
        self.protocol = protocol

    def write(self, data: bytes) -> int:
        if self.protocol == 'udp':
            # One document per datagram
            return self.sock.send(data)
        self.sock.sendall(data)
        return len(data)

    def close(self) -> None:
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def dial(protocol: str, address: str, timeout: float = 5.0) -> SocketStream:
    """
    Connect to a Logstash input.

    Args:
        protocol: 'tcp' or 'udp'
        address: host:port
        timeout: Connect and send timeout in seconds

    Returns:
        SocketStream ready to be handed to a hook

    Raises:
        ConfigError: If protocol or address is invalid
        OSError: If the connection cannot be established
    """
    protocol = protocol.lower()
    if protocol not in PROTOCOLS:
        raise ConfigError(f"Invalid protocol: {protocol}. Must be one of {list(PROTOCOLS)}")

    host, port = parse_address(address)

    if protocol == 'tcp':
        sock = socket.create_connection((host, port), timeout=timeout)
    else:
        family, type_, proto, _, sockaddr = socket.getaddrinfo(
            host, port, type=socket.SOCK_DGRAM
        )[0]
        sock = socket.socket(family, type_, proto)
        sock.settimeout(timeout)
        try:
            sock.connect(sockaddr)
        except OSError:
            sock.close()
            raise

    logger.debug("Connected to %s://%s:%d", protocol, host, port)
    return SocketStream(sock, protocol)
