"""Burn-after-reading file drop server: encrypted storage with download limits."""

from __future__ import annotations

import argparse
import secrets
import socket
import socketserver
import string
import struct
import sys
import threading
import time
from dataclasses import dataclass
from itertools import takewhile
from pathlib import Path

from .crypto import IV_SIZE, KEY_SIZE, CryptoError, decrypt, encrypt, generate_random_bytes
from .files import FileError, read_file, write_file

__all__ = [
    "PORT",
    "BUFFER_SIZE",
    "MAGIC",
    "DEFAULT_EXPIRY_SECONDS",
    "ProtocolError",
    "DropError",
    "Metadata",
    "DropStore",
    "generate_file_id",
    "hex_to_bytes",
    "handle_client",
    "serve",
    "main",
]

PORT = 8080
BUFFER_SIZE = 4096
MAGIC = 0xBEEF
DEFAULT_EXPIRY_SECONDS = 86400
FILE_ID_LENGTH = 8
KEY_HEX_LENGTH = KEY_SIZE * 2

_ID_CHARSET = string.digits + string.ascii_uppercase
_UPLOAD_PARAMS = struct.Struct("!ii")
_MAGIC_FORMAT = struct.Struct("!H")
_LINGER_SECONDS = 1.0


class ProtocolError(Exception):
    """Raised when a client violates the wire protocol."""


class DropError(Exception):
    """Raised when a stored drop cannot be delivered."""


def generate_file_id() -> str:
    """Return a random 8-character identifier of digits and upper-case letters."""
    return "".join(secrets.choice(_ID_CHARSET) for _ in range(FILE_ID_LENGTH))


def _parse_hex_byte(pair: str) -> int:
    text = pair.lstrip()
    sign = 1
    if text.startswith(("+", "-")):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = "".join(takewhile(lambda ch: ch in string.hexdigits, text))
    value = int(digits, 16) if digits else 0
    return (sign * value) & 0xFF


def hex_to_bytes(text: str) -> bytes:
    """Decode ``text`` two characters at a time; unparsable pairs become zero."""
    return bytes(_parse_hex_byte(text[i:i + 2]) for i in range(0, len(text), 2))


@dataclass
class Metadata:
    """Download limit, download count and expiry time of a stored drop."""

    max_downloads: int
    downloads: int
    expiry: int

    @classmethod
    def load(cls, path) -> "Metadata":
        """Read metadata from ``path``."""
        try:
            fields = Path(path).read_text().split()
        except OSError as exc:
            raise DropError("Missing") from exc
        try:
            max_downloads, downloads, expiry = (int(field) for field in fields[:3])
        except ValueError as exc:
            raise DropError("Corrupt") from exc
        return cls(max_downloads, downloads, expiry)

    def save(self, path) -> None:
        """Write metadata to ``path``."""
        Path(path).write_text(f"{self.max_downloads} {self.downloads} {self.expiry}")

    @property
    def exhausted(self) -> bool:
        return self.downloads >= self.max_downloads

    def expired(self, now: float) -> bool:
        return now > self.expiry


def _normalise(limit: int, seconds: int) -> tuple[int, int]:
    return (limit if limit > 0 else 1, seconds if seconds > 0 else DEFAULT_EXPIRY_SECONDS)


class DropStore:
    """Encrypted drops kept as ``<id>.enc`` and ``<id>.meta`` in one directory."""

    def __init__(self, directory=".") -> None:
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def _paths(self, file_id: str) -> tuple[Path, Path]:
        return self.directory / f"{file_id}.enc", self.directory / f"{file_id}.meta"

    def _burn(self, file_id: str) -> None:
        for path in self._paths(file_id):
            path.unlink(missing_ok=True)

    def upload(self, data: bytes, limit: int = 1, seconds: int = DEFAULT_EXPIRY_SECONDS) -> tuple[str, str]:
        """Encrypt and store ``data``; return its file id and the hex key."""
        limit, seconds = _normalise(limit, seconds)
        key = generate_random_bytes(KEY_SIZE)
        iv = generate_random_bytes(IV_SIZE)
        encrypted = encrypt(data, key, iv)
        file_id = generate_file_id()
        enc_path, meta_path = self._paths(file_id)
        write_file(enc_path, iv + encrypted)
        Metadata(limit, 0, int(time.time()) + seconds).save(meta_path)
        return file_id, key.hex()

    def download(self, file_id: str, key_hex: str) -> bytes:
        """Decrypt a stored drop and count the download, burning it when spent."""
        enc_path, meta_path = self._paths(file_id)
        with self._lock:
            metadata = Metadata.load(meta_path)
            if metadata.exhausted or metadata.expired(time.time()):
                self._burn(file_id)
                raise DropError("Burned")
            try:
                raw = read_file(enc_path)
            except FileError as exc:
                raise DropError("Missing") from exc
            if len(raw) < IV_SIZE:
                raise DropError("Corrupt")
            try:
                plain = decrypt(raw[IV_SIZE:], hex_to_bytes(key_hex), raw[:IV_SIZE])
            except CryptoError as exc:
                raise DropError(str(exc)) from exc
            metadata.downloads += 1
            if metadata.exhausted:
                self._burn(file_id)
                print(f"[Core] {file_id} burned.")
            else:
                metadata.save(meta_path)
        return plain


def _recv_exact(conn, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = conn.recv(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _recv_all(conn) -> bytes:
    chunks = []
    while chunk := conn.recv(BUFFER_SIZE):
        chunks.append(chunk)
    return b"".join(chunks)


def _read_upload_header(conn) -> tuple[int, int]:
    magic = _recv_exact(conn, _MAGIC_FORMAT.size)
    if len(magic) < _MAGIC_FORMAT.size or _MAGIC_FORMAT.unpack(magic)[0] != MAGIC:
        raise ProtocolError("Expected 0xBEEF")
    params = _recv_exact(conn, _UPLOAD_PARAMS.size)
    if len(params) < _UPLOAD_PARAMS.size:
        raise ProtocolError("Truncated upload parameters")
    return _UPLOAD_PARAMS.unpack(params)


def _handle_upload(conn, store: DropStore) -> None:
    try:
        limit, seconds = _read_upload_header(conn)
    except ProtocolError as exc:
        print(f"[Core] Protocol Error: {exc}", file=sys.stderr)
        return
    limit, seconds = _normalise(limit, seconds)
    print(f"[Core] Upload: Limit={limit}, Expiry={seconds}s")
    data = _recv_all(conn)
    file_id, key_hex = store.upload(data, limit, seconds)
    conn.sendall(f"{file_id}|{key_hex}".encode("ascii"))


def _handle_download(conn, store: DropStore) -> None:
    header = _recv_exact(conn, FILE_ID_LENGTH + KEY_HEX_LENGTH)
    if len(header) < FILE_ID_LENGTH + KEY_HEX_LENGTH:
        return
    file_id = header[:FILE_ID_LENGTH].decode("latin-1")
    key_hex = header[FILE_ID_LENGTH:].decode("latin-1")
    try:
        plain = store.download(file_id, key_hex)
    except DropError:
        conn.sendall(b"ERROR")
        return
    conn.sendall(plain)
    conn.shutdown(socket.SHUT_WR)
    time.sleep(_LINGER_SECONDS)


def handle_client(conn, store: DropStore) -> None:
    """Serve one upload (``U``) or download (``D``) request, then close ``conn``."""
    try:
        command = conn.recv(1)
        if command == b"U":
            _handle_upload(conn, store)
        elif command == b"D":
            _handle_download(conn, store)
    finally:
        conn.close()


class _Handler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        handle_client(self.request, self.server.store)


class _Server(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True
    request_queue_size = 3

    def __init__(self, address, store: DropStore) -> None:
        self.store = store
        super().__init__(address, _Handler)


def serve(host: str = "0.0.0.0", port: int = PORT, directory=".") -> None:
    """Accept clients forever, each on its own thread."""
    with _Server((host, port), DropStore(directory)) as server:
        print(">>> SafeDrop Core V3 (Magic Bytes Enabled)...", flush=True)
        server.serve_forever()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="safedrop-server", description="Run the drop server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--directory", default=".")
    args = parser.parse_args(argv)
    try:
        serve(args.host, args.port, args.directory)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())