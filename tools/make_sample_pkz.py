import json
import random
from pathlib import Path

MAGIC = b"RIFX"
PAD = b"\x00\x00\x00\x00"

# Record lengths must be stride-aligned and clear the 221-byte header guard.
MIN_RECORD_LEN = 224

NAMES = [
    "vo_intro_01",
    "sfx_door_open",
    "amb_forest_loop",
    "mus_battle_a",
    "ui_click",
]


def body_bytes(n: int, rng: random.Random) -> bytes:
    # 0x80..0xFE: never zero, never a word character, never the magic.
    return bytes(rng.randint(0x80, 0xFE) for _ in range(n))


def build_archive(names: list[str], orphan: bool = False, seed: int = 0) -> tuple[bytes, list[dict]]:
    """Build a synthetic decompressed archive and the layout of its records."""
    rng = random.Random(seed)
    blob = bytearray(b"PKZ\x01" + body_bytes(28, rng))
    layout = []

    for name in names:
        # Junk token without underscore, then the real name, then a separator.
        blob += b"\x00" + b"chunk" + str(rng.randint(10, 99)).encode("ascii") + b"\x01"
        blob += name.encode("ascii") + b"\x02"

        length = MIN_RECORD_LEN + 4 * rng.randint(0, 64)
        start = len(blob)
        blob += MAGIC + body_bytes(length - len(MAGIC), rng)
        layout.append({"file": name + ".wem", "start_offset": start, "end_offset": start + length})
        blob += PAD * 2

    if orphan:
        # A record that never reaches its padding.
        blob += b"\x03orphan_tail\x04"
        start = len(blob)
        blob += MAGIC + body_bytes(96, rng)
        layout.append({"file": "orphan_tail.wem", "start_offset": start, "end_offset": None})

    return bytes(blob), layout


def write_archive(out_path: str, records: int, orphan: bool = False, seed: int = 0) -> Path:
    names = [NAMES[i % len(NAMES)] + (f"_{i // len(NAMES)}" if i >= len(NAMES) else "") for i in range(records)]
    blob, layout = build_archive(names, orphan=orphan, seed=seed)

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(blob)
    out.with_suffix(".layout.json").write_text(json.dumps(layout, indent=2) + "\n", encoding="utf-8")

    print(f"GENERATED: {out}")
    return out


if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/make_sample_pkz.py OUT_FILE [--records N] [--orphan] [--seed S]

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    def pop_int(arg_list: list[str], flag: str, default: int) -> tuple[int, list[str]]:
        if flag not in arg_list:
            return default, arg_list
        i = arg_list.index(flag)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{flag} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    orphan, args = pop_flag(args, "--orphan")
    records, args = pop_int(args, "--records", 3)
    seed, args = pop_int(args, "--seed", 0)

    out = args[0] if len(args) > 0 else "sample.pkz"
    write_archive(out, records, orphan=orphan, seed=seed)
