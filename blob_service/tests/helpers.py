import hashlib
import os


def generate_random_content(size_bytes):
    """Generate random binary content of specified size."""
    return os.urandom(size_bytes)


def sha256_hex(data):
    return hashlib.sha256(data).hexdigest()


def stored_files(data_dir):
    """All regular files under the store root."""
    return sorted(p for p in data_dir.rglob("*") if p.is_file())
