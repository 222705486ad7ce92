"""Hand-off of extracted .wem files to an external decoder."""
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, Protocol

from pkz_core.protocol import DEFAULT_DECODER, WAV_SUFFIX, WEM_SUFFIX

from .export import STATUS_CONVERTED, STATUS_CONVERT_FAILED


class Transcoder(Protocol):
    def __call__(self, src: Path, dst: Path) -> bool:
        """Produce dst from src. Returns False on failure."""
        ...


class VgmstreamTranscoder:
    """Runs vgmstream-cli (or a compatible decoder) once per file."""

    def __init__(self, decoder: str = DEFAULT_DECODER):
        self.decoder = decoder
        self.last_error = ""

    def __call__(self, src: Path, dst: Path) -> bool:
        cmd = [self.decoder, "-o", str(dst), str(src)]
        r = subprocess.run(cmd, capture_output=True, text=True, errors="replace", check=False)
        self.last_error = r.stderr.strip()
        return r.returncode == 0


def convert_extracted(out_dir: Path, transcoder: Transcoder, names: Iterable[str] | None = None) -> dict[str, str]:
    """Convert .wem files in out_dir to sibling .wav files.

    Only the files listed in names are touched; without names every .wem in
    out_dir is converted. The raw file is removed only when the decoder
    succeeds. A failing file is reported and kept, and the remaining files
    are still processed. Returns a status per .wem file name.
    """
    out_dir = Path(out_dir)
    if names is None:
        wems = sorted(out_dir.glob("*" + WEM_SUFFIX))
    else:
        wems = [out_dir / n for n in sorted(set(names))]

    results: dict[str, str] = {}
    for wem in wems:
        wav = wem.with_suffix(WAV_SUFFIX)
        try:
            ok = transcoder(wem, wav)
        except OSError as e:
            # Decoder missing or not executable
            print(f"Error converting {wem.name} to {wav.name}: {e}")
            results[wem.name] = STATUS_CONVERT_FAILED
            continue

        if ok:
            wem.unlink()
            print(f"Converted {wem.name} to {wav.name}")
            results[wem.name] = STATUS_CONVERTED
        else:
            detail = getattr(transcoder, "last_error", "")
            print(f"Error converting {wem.name} to {wav.name}" + (f": {detail}" if detail else ""))
            results[wem.name] = STATUS_CONVERT_FAILED

    return results
