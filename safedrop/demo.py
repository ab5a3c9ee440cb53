"""Local encrypt/decrypt round trip followed by timed deletion of the result."""

from __future__ import annotations

import argparse
import os
import sys
import threading
import time

from .crypto import IV_SIZE, KEY_SIZE, CryptoError, decrypt, encrypt, generate_random_bytes
from .files import FileError, read_file, write_file

__all__ = ["secure_delete", "run_demo", "main"]


def secure_delete(filepath, delay_seconds: float) -> bool:
    """Wait ``delay_seconds`` then delete ``filepath``; return whether it was removed."""
    print(f"[SecureDelete] Timer started for: {filepath}")
    time.sleep(delay_seconds)
    try:
        os.remove(filepath)
    except OSError:
        print(f"[SecureDelete] ERROR: Could not delete {filepath}", file=sys.stderr)
        return False
    print(f"[SecureDelete] SUCCESS: File {filepath} has been wiped from disk.")
    return True


def run_demo(input_file, encrypted_file, decrypted_file) -> bytes:
    """Encrypt ``input_file`` to disk, decrypt it back and return the restored bytes."""
    print("Generating 256-bit AES Key and IV...")
    key = generate_random_bytes(KEY_SIZE)
    iv = generate_random_bytes(IV_SIZE)

    print(f"Reading file: {input_file}...")
    file_data = read_file(input_file)
    print(f"Original Size: {len(file_data)} bytes.")

    print("Encrypting data...")
    write_file(encrypted_file, encrypt(file_data, key, iv))
    print(f"Saved encrypted file to: {encrypted_file}")

    print("Decrypting data...")
    decrypted = decrypt(read_file(encrypted_file), key, iv)
    write_file(decrypted_file, decrypted)
    print(f"Restored file to: {decrypted_file}")
    print(f"SUCCESS! Open {decrypted_file} to verify.")
    return decrypted


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="safedrop-demo", description="Encrypt and restore a file locally.")
    parser.add_argument("--input", default="me2.jpeg")
    parser.add_argument("--encrypted", default="me2.enc")
    parser.add_argument("--decrypted", default="me2_restored.jpeg")
    parser.add_argument("--delay", type=float, default=5)
    args = parser.parse_args(argv)

    try:
        run_demo(args.input, args.encrypted, args.decrypted)
    except (FileError, CryptoError) as exc:
        print(f"CRITICAL ERROR: {exc}", file=sys.stderr)
        return 1

    cleaner = threading.Thread(target=secure_delete, args=(args.decrypted, args.delay))
    cleaner.start()
    cleaner.join()
    return 0


if __name__ == "__main__":
    sys.exit(main())