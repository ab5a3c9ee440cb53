"""Command-line client that sends a file's raw bytes to the server."""

from __future__ import annotations

import argparse
import socket
import sys

from .files import FileError, read_file
from .server import PORT

__all__ = ["send_file", "main"]


def send_file(filepath, host: str = "127.0.0.1", port: int = PORT) -> int:
    """Connect to ``host:port``, send the file's bytes and return how many were sent."""
    with socket.create_connection((host, port)) as sock:
        data = read_file(filepath)
        sock.sendall(data)
    return len(data)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="safedrop-client", description="Send a file to the server.")
    parser.add_argument("filepath")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)

    print(f"Reading file: {args.filepath}...")
    try:
        sent = send_file(args.filepath, args.host, args.port)
    except FileError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError:
        print("\nConnection Failed ")
        return 1
    print(f"Sent {sent} bytes to server.")
    print("File Sent Successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())