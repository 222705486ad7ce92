"""PKZ audio - Archive to .wem Extractor."""
from __future__ import annotations

import hashlib
from pathlib import Path

import click

from pkz_core.protocol import DECODER_ENVVAR, DEFAULT_DECODER, INDEX_FILE
from pkz_extract.export import (
    STATUS_CONVERTED,
    STATUS_EXTRACTED,
    STATUS_OVERWRITTEN,
    export_record,
    write_index,
)
from pkz_extract.streams import ByteStream, RecordScanner, Skip
from pkz_extract.transcode import Transcoder, VgmstreamTranscoder, convert_extracted


def default_out_dir(archive_path: Path) -> Path:
    """Sibling directory named after the archive, extension stripped."""
    return archive_path.parent / archive_path.stem


def extract_archive(
    archive_path: Path,
    out_dir: Path | None = None,
    transcoder: Transcoder | None = None,
    write_index_file: bool = True,
) -> dict:
    """Extract every embedded audio record of an archive into out_dir."""
    archive_path = Path(archive_path)
    if not archive_path.is_file():
        raise FileNotFoundError(f"File not found: {archive_path}")

    out_dir = Path(out_dir) if out_dir is not None else default_out_dir(archive_path)
    out_dir.mkdir(parents=True, exist_ok=True)
    # An index left by an earlier run must not describe this one.
    (out_dir / INDEX_FILE).unlink(missing_ok=True)

    print(f"Scanning archive: {archive_path}")

    rows: list[dict] = []
    extracted = 0

    # 1. Scan and export
    with ByteStream.open(archive_path) as stream:
        scanner = RecordScanner(stream)
        for outcome in scanner:
            if isinstance(outcome, Skip):
                print(f"Audio header found at position: 0x{outcome.marker_offset:X}")
                print(f"No proper ending bytes found after the header at 0x{outcome.marker_offset:X}")
                continue

            rec = outcome
            print(f"Audio header found at position: 0x{rec.start_offset:X}")
            print(f"Extracting file: {rec.name}")

            export_record(archive_path, out_dir, rec.name, rec.start_offset, rec.end_offset)

            # Last writer wins on the output file
            for row in rows:
                if row["file"] == rec.name and row["status"] == STATUS_EXTRACTED:
                    row["status"] = STATUS_OVERWRITTEN

            rows.append({
                "seq": extracted,
                "file": rec.name,
                "start_offset": rec.start_offset,
                "end_offset": rec.end_offset,
                "length": rec.length,
                "content_hash": hashlib.sha256(stream.read(rec.start_offset, rec.length)).hexdigest(),
                "status": STATUS_EXTRACTED,
            })
            extracted += 1
            print(f"File saved as: {rec.name}")

        stats = scanner.get_scan_stats()

    # 2. Hand off to the decoder
    conversions: dict[str, str] = {}
    if transcoder is not None and extracted > 0:
        conversions = convert_extracted(out_dir, transcoder, names=[row["file"] for row in rows])
        for row in rows:
            if row["status"] == STATUS_EXTRACTED:
                row["status"] = conversions.get(row["file"], row["status"])

    # 3. Index
    if write_index_file:
        write_index(out_dir, rows)

    converted = sum(1 for s in conversions.values() if s == STATUS_CONVERTED)
    if extracted == 0:
        print("No files were extracted.")
    elif transcoder is not None:
        print(f"{extracted} files were extracted and {converted} converted.")
    else:
        print(f"{extracted} files were extracted.")

    return {
        "out_dir": str(out_dir),
        "markers": stats["markers"],
        "extracted": extracted,
        "skipped": stats["skipped"],
        "converted": converted,
        "convert_failed": len(conversions) - converted,
    }


@click.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--out", "out_dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Output directory (default: sibling directory named after the archive)")
@click.option("--decoder", envvar=DECODER_ENVVAR, default=DEFAULT_DECODER, show_default=True,
              help="Decoder executable used to convert .wem to .wav")
@click.option("--no-convert", is_flag=True, help="Keep the raw .wem files and skip the decoder")
@click.option("--no-index", is_flag=True, help="Do not write the extraction index")
def main(archive: Path, out_dir: Path | None, decoder: str, no_convert: bool, no_index: bool) -> None:
    """Extract embedded audio records from a decompressed .pkz archive."""
    transcoder = None if no_convert else VgmstreamTranscoder(decoder)
    try:
        extract_archive(archive, out_dir, transcoder=transcoder, write_index_file=not no_index)
    except Exception as e:
        # Fail closed with a single-line reason.
        print(f"FATAL: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
