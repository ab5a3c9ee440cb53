import socket
import struct
import time

import pytest

from safedrop.server import (
    DEFAULT_EXPIRY_SECONDS,
    MAGIC,
    DropError,
    DropStore,
    Metadata,
    generate_file_id,
    handle_client,
    hex_to_bytes,
)


def _exchange(store, payload):
    server_sock, client_sock = socket.socketpair()
    with client_sock:
        client_sock.sendall(payload)
        client_sock.shutdown(socket.SHUT_WR)
        handle_client(server_sock, store)
        chunks = []
        while chunk := client_sock.recv(4096):
            chunks.append(chunk)
        return b"".join(chunks)


def test_generate_file_id_shape():
    for _ in range(50):
        file_id = generate_file_id()
        assert len(file_id) == 8
        assert all(ch in "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ" for ch in file_id)


def test_hex_to_bytes_round_trip():
    data = bytes(range(256))
    assert hex_to_bytes(data.hex()) == data


def test_hex_to_bytes_values():
    assert hex_to_bytes("00ff10") == b"\x00\xff\x10"
    assert hex_to_bytes("zz") == b"\x00"
    assert hex_to_bytes("1z") == b"\x01"


def test_metadata_round_trip(tmp_path):
    path = tmp_path / "x.meta"
    Metadata(3, 1, 1700000000).save(path)
    assert path.read_text() == "3 1 1700000000"
    assert Metadata.load(path) == Metadata(3, 1, 1700000000)


def test_metadata_missing_and_corrupt(tmp_path):
    with pytest.raises(DropError):
        Metadata.load(tmp_path / "none.meta")
    bad = tmp_path / "bad.meta"
    bad.write_text("3 x")
    with pytest.raises(DropError):
        Metadata.load(bad)


def test_upload_download_single_use(tmp_path):
    store = DropStore(tmp_path)
    file_id, key_hex = store.upload(b"hello drop", 1, 60)
    assert len(file_id) == 8
    assert len(key_hex) == 64
    enc = tmp_path / f"{file_id}.enc"
    assert len(enc.read_bytes()) == 16 + 16
    assert store.download(file_id, key_hex) == b"hello drop"
    assert not enc.exists()
    assert not (tmp_path / f"{file_id}.meta").exists()
    with pytest.raises(DropError):
        store.download(file_id, key_hex)


def test_upload_normalises_limits(tmp_path):
    store = DropStore(tmp_path)
    before = int(time.time())
    file_id, _ = store.upload(b"data", 0, -5)
    meta = Metadata.load(tmp_path / f"{file_id}.meta")
    assert meta.max_downloads == 1
    assert meta.downloads == 0
    assert before + DEFAULT_EXPIRY_SECONDS <= meta.expiry <= int(time.time()) + DEFAULT_EXPIRY_SECONDS


def test_download_counts_until_limit(tmp_path):
    store = DropStore(tmp_path)
    file_id, key_hex = store.upload(b"twice", 2, 60)
    assert store.download(file_id, key_hex) == b"twice"
    assert Metadata.load(tmp_path / f"{file_id}.meta").downloads == 1
    assert store.download(file_id, key_hex) == b"twice"
    with pytest.raises(DropError):
        store.download(file_id, key_hex)


def test_wrong_key_keeps_drop(tmp_path):
    store = DropStore(tmp_path)
    file_id, key_hex = store.upload(b"secret data", 1, 60)
    with pytest.raises(DropError):
        store.download(file_id, "00" * 32)
    assert store.download(file_id, key_hex) == b"secret data"


def test_expired_drop_is_burned(tmp_path):
    store = DropStore(tmp_path)
    file_id, key_hex = store.upload(b"old", 5, 60)
    meta_path = tmp_path / f"{file_id}.meta"
    Metadata(5, 0, int(time.time()) - 10).save(meta_path)
    with pytest.raises(DropError):
        store.download(file_id, key_hex)
    assert not meta_path.exists()
    assert not (tmp_path / f"{file_id}.enc").exists()


def test_handle_client_upload_then_download(tmp_path):
    store = DropStore(tmp_path)
    payload = b"U" + struct.pack("!Hii", MAGIC, 1, 60) + b"payload bytes"
    assert payload[:3] == b"U\xbe\xef"
    response = _exchange(store, payload).decode("ascii")
    file_id, key_hex = response.split("|")
    assert (tmp_path / f"{file_id}.enc").exists()
    request = b"D" + file_id.encode() + key_hex.encode()
    assert _exchange(store, request) == b"payload bytes"
    assert not (tmp_path / f"{file_id}.enc").exists()


def test_handle_client_bad_magic(tmp_path):
    store = DropStore(tmp_path)
    payload = b"U" + struct.pack("!Hii", 0x1234, 1, 60) + b"data"
    assert _exchange(store, payload) == b""
    assert list(tmp_path.iterdir()) == []


def test_handle_client_unknown_drop(tmp_path):
    store = DropStore(tmp_path)
    request = b"D" + b"ABCDEFGH" + b"00" * 32
    assert _exchange(store, request) == b"ERROR"


def test_handle_client_short_download_header(tmp_path):
    store = DropStore(tmp_path)
    assert _exchange(store, b"DABC") == b""