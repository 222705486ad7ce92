from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from pkz_core.protocol import INDEX_FILE

STATUS_EXTRACTED = "EXTRACTED"
STATUS_OVERWRITTEN = "OVERWRITTEN"
STATUS_CONVERTED = "CONVERTED"
STATUS_CONVERT_FAILED = "CONVERT_FAILED"

INDEX_SCHEMA = pa.schema(
    [
        ("seq", pa.int32()),
        ("file", pa.string()),
        ("start_offset", pa.int64()),
        ("end_offset", pa.int64()),
        ("length", pa.int64()),
        ("content_hash", pa.string()),
        ("status", pa.string()),
    ]
)


def export_record(source_path: Path, output_directory: Path, name: str, start: int, end: int) -> Path:
    """Copy bytes [start, end) of the source into output_directory/name.

    An existing file of the same name is replaced.
    """
    if not 0 <= start < end:
        raise ValueError(f"Invalid record range [{start}, {end})")

    length = end - start
    out_path = Path(output_directory) / name

    with open(source_path, "rb") as src:
        src.seek(start)
        data = src.read(length)
    if len(data) != length:
        raise OSError(f"Short read at offset 0x{start:X}: wanted {length} bytes, got {len(data)}")

    with open(out_path, "wb") as out:
        out.write(data)

    return out_path


def write_index(out_dir: Path, rows: list[dict]) -> Path | None:
    """Write the extraction index for out_dir. Nothing is written for an empty run."""
    if not rows:
        return None

    df = pd.DataFrame(rows).sort_values("seq")
    table = pa.Table.from_pandas(df, schema=INDEX_SCHEMA, preserve_index=False)

    index_path = Path(out_dir) / INDEX_FILE
    pq.write_table(table, index_path)
    return index_path
