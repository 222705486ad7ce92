from pathlib import Path
import hashlib

from pkz_core.protocol import MAGIC_WEM_REC

def file_sha256(p: Path) -> str:
    h = hashlib.sha256()
    with open(p, "rb") as f:
        for chunk in iter(lambda: f.read(64 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()

def looks_like_parquet(p: Path) -> bool:
    b = p.read_bytes()
    return len(b) >= 8 and b[:4] == b"PAR1" and b[-4:] == b"PAR1"

def looks_like_wem(p: Path) -> bool:
    with open(p, "rb") as f:
        return f.read(len(MAGIC_WEM_REC)) == MAGIC_WEM_REC
