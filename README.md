# safedrop

A small encrypted file drop with burn-after-reading semantics.

Uploaded data is encrypted with AES-256-CBC (PKCS#7 padding) under a freshly
generated key. The server stores only the ciphertext, prefixed by its IV, and a
small metadata file. It returns the key to the uploader and does not store it.
A drop is deleted when it reaches its download limit or after it expires.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Commands

### `safedrop-server [--host HOST] [--port PORT] [--directory DIR]`

Starts a threaded TCP server. The defaults are `0.0.0.0`, port `8080`, and the
current directory. Each drop is stored in `DIR` as `<ID>.enc` and `<ID>.meta`.
The `.meta` file holds the download limit, the download count and the expiry
as a Unix timestamp.

The first byte of each connection selects the command:

- **Upload** (`U`): the magic bytes `0xBEEF`, then two big-endian signed 32-bit
  integers, the download limit and the lifetime in seconds. The raw file bytes
  follow until the client closes its write side. A limit of zero or less
  becomes 1. A lifetime of zero or less becomes 86400 seconds. The reply is
  `<ID>|<key-hex>`. The ID is 8 characters from `0-9A-Z` and the key is 64 hex
  digits. If the magic bytes are wrong, the server prints a protocol error and
  closes the connection without a reply.
- **Download** (`D`): 72 bytes made of the 8-character ID followed by the
  64-digit hex key. The reply is the decrypted file. The server then shuts down
  its write side and waits one second before it closes. The reply is `ERROR` if
  the drop is missing, already exhausted, expired, or corrupt, or if the key is
  wrong. A download that uses up the last allowed download deletes the drop.
  If the header is shorter than 72 bytes, the connection closes without a
  reply.

Any other first byte closes the connection.

### `safedrop-client FILEPATH [--host HOST] [--port PORT]`

Reads `FILEPATH` and sends its raw bytes to the server. The default server is
`127.0.0.1:8080`.

### `safedrop-demo [--input F] [--encrypted F] [--decrypted F] [--delay SECONDS]`

Does a local round trip. It encrypts the input file (default `me2.jpeg`) under a
random key to the encrypted file (default `me2.enc`). It then decrypts that file
back to the decrypted file (default `me2_restored.jpeg`). After `--delay`
seconds (default 5) it deletes the restored copy. The command exits with status
1 if a file cannot be read or written or if decryption fails.

## Library use

```python
from safedrop.crypto import generate_random_bytes, encrypt, decrypt, KEY_SIZE, IV_SIZE
from safedrop.server import DropStore

key = generate_random_bytes(KEY_SIZE)
iv = generate_random_bytes(IV_SIZE)
assert decrypt(encrypt(b"hello", key, iv), key, iv) == b"hello"

store = DropStore("drops")
file_id, key_hex = store.upload(b"secret notes", limit=1, seconds=3600)
data = store.download(file_id, key_hex)   # the drop is deleted after this
```

- `safedrop.crypto`: `encrypt` and `decrypt` raise `CryptoError` for a key that
  is not 32 bytes or an IV that is not 16 bytes. `decrypt` also raises it for
  empty input, bad padding, or input that is not a whole number of blocks.
- `safedrop.files`: `read_file` and `write_file` raise `FileError`.
- `safedrop.server`:
  - `DropStore.download` raises `DropError` when a drop is missing, exhausted,
    expired or corrupt, or when decryption fails.
  - `DropStore.upload` raises `FileError` if the drop cannot be written.
  - `Metadata` reads and writes the `.meta` files.
  - `generate_file_id` and `hex_to_bytes` are helpers.
  - `handle_client` serves a single connection.
  - `serve` runs the server.

## What it does not do

`safedrop-client` sends only the file's bytes. It does not send the `U` command
byte, the magic bytes, or the limit and lifetime. It does not read a reply. The
server therefore does not accept its output as an upload. No command in the
package performs a full upload or a download. To use those operations, speak
the protocol above over a socket, or use `DropStore` directly.