from pathlib import Path

import pandas as pd

from pkz_core.protocol import INDEX_FILE, WAV_SUFFIX
from .const import ERRORS
from .digest import file_sha256, looks_like_parquet, looks_like_wem

SKIP_STATUSES = {"OVERWRITTEN"}
CONVERTED_STATUS = "CONVERTED"

def _error(code: str, **extra) -> dict:
    return {"code": code, "message": ERRORS[code], **extra}

def _result(errors: list) -> dict:
    return {"status": "FAIL" if errors else "PASS", "error_count": len(errors), "errors": errors}

def verify_output(out_dir: Path) -> dict:
    out_dir = Path(out_dir)
    index_path = out_dir / INDEX_FILE

    if not index_path.exists():
        return _result([_error("E_LAYOUT_MISSING", path=str(index_path))])

    if not looks_like_parquet(index_path):
        return _result([_error("E_INDEX_PARQUET", path=str(index_path))])

    try:
        df = pd.read_parquet(index_path)
    except Exception as e:
        return _result([_error("E_INDEX_PARQUET", path=str(index_path), detail=str(e))])

    errors = []
    for row in df.sort_values("seq").itertuples(index=False):
        if row.status in SKIP_STATUSES:
            continue

        p = out_dir / row.file
        if row.status == CONVERTED_STATUS:
            # Raw file was handed to the decoder and removed.
            wav = p.with_suffix(WAV_SUFFIX)
            if not wav.exists():
                errors.append(_error("E_FILE_MISSING", path=str(wav)))
            continue

        if not p.exists():
            errors.append(_error("E_FILE_MISSING", path=str(p)))
            continue

        size = p.stat().st_size
        if size != int(row.length):
            errors.append(_error("E_LENGTH_MISMATCH", path=str(p), expected=int(row.length), found=int(size)))
            continue

        if not looks_like_wem(p):
            errors.append(_error("E_MAGIC_MISSING", path=str(p)))
            continue

        computed = file_sha256(p)
        if computed != row.content_hash:
            errors.append(_error("E_HASH_MISMATCH", path=str(p), expected=row.content_hash, computed=computed))

    return _result(errors)
