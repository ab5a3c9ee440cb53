"""Encrypted burn-after-reading file drop: AES-256-CBC helpers, file I/O, a TCP drop server, a raw-bytes client and a local demo."""

__version__ = "1.0.0"