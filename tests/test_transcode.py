import os
import stat

import pytest

from pkz_extract.transcode import VgmstreamTranscoder, convert_extracted


class FakeTranscoder:
    def __init__(self, fail=()):
        self.fail = set(fail)
        self.calls = []

    def __call__(self, src, dst):
        self.calls.append((src.name, dst.name))
        if src.name in self.fail:
            return False
        dst.write_bytes(b"RIFF" + src.read_bytes()[4:])
        return True


def populate(out_dir, names):
    out_dir.mkdir(exist_ok=True)
    for n in names:
        (out_dir / n).write_bytes(b"RIFX" + n.encode("ascii"))


def test_convert_success_removes_raw(tmp_path):
    populate(tmp_path, ["a_one.wem", "b_two.wem"])
    t = FakeTranscoder()

    results = convert_extracted(tmp_path, t)

    assert results == {"a_one.wem": "CONVERTED", "b_two.wem": "CONVERTED"}
    assert t.calls == [("a_one.wem", "a_one.wav"), ("b_two.wem", "b_two.wav")]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["a_one.wav", "b_two.wav"]


def test_convert_failure_keeps_raw_and_continues(tmp_path, capsys):
    populate(tmp_path, ["a_one.wem", "b_two.wem"])

    results = convert_extracted(tmp_path, FakeTranscoder(fail={"a_one.wem"}))

    assert results == {"a_one.wem": "CONVERT_FAILED", "b_two.wem": "CONVERTED"}
    assert (tmp_path / "a_one.wem").exists()
    assert not (tmp_path / "a_one.wav").exists()
    assert (tmp_path / "b_two.wav").exists()
    assert "Error converting a_one.wem" in capsys.readouterr().out


def test_convert_missing_decoder(tmp_path, capsys):
    populate(tmp_path, ["a_one.wem"])
    t = VgmstreamTranscoder(str(tmp_path / "no-such-decoder"))

    results = convert_extracted(tmp_path, t)

    assert results == {"a_one.wem": "CONVERT_FAILED"}
    assert (tmp_path / "a_one.wem").exists()
    assert "Error converting a_one.wem" in capsys.readouterr().out


def test_convert_ignores_other_files(tmp_path):
    populate(tmp_path, ["a_one.wem"])
    (tmp_path / "index.parquet").write_bytes(b"PAR1")
    t = FakeTranscoder()

    convert_extracted(tmp_path, t)

    assert t.calls == [("a_one.wem", "a_one.wav")]


@pytest.mark.skipif(os.name == "nt", reason="shell script decoder")
@pytest.mark.parametrize("exit_code,expected", [(0, "CONVERTED"), (3, "CONVERT_FAILED")])
def test_vgmstream_transcoder_invocation(tmp_path, exit_code, expected):
    decoder = tmp_path / "fake-vgmstream"
    decoder.write_text(f'#!/bin/sh\n[ "$1" = "-o" ] || exit 9\ncp "$3" "$2"\nexit {exit_code}\n')
    decoder.chmod(decoder.stat().st_mode | stat.S_IXUSR)

    out_dir = tmp_path / "out"
    populate(out_dir, ["a_one.wem"])

    results = convert_extracted(out_dir, VgmstreamTranscoder(str(decoder)))

    assert results == {"a_one.wem": expected}
    assert (out_dir / "a_one.wav").read_bytes() == b"RIFXa_one.wem"
    assert (out_dir / "a_one.wem").exists() == (expected == "CONVERT_FAILED")


def test_convert_only_named_files(tmp_path):
    populate(tmp_path, ["a_one.wem", "b_two.wem", "c_three.wem"])
    t = FakeTranscoder()

    results = convert_extracted(tmp_path, t, names=["b_two.wem", "b_two.wem"])

    assert results == {"b_two.wem": "CONVERTED"}
    assert t.calls == [("b_two.wem", "b_two.wav")]
    assert (tmp_path / "a_one.wem").exists()
    assert (tmp_path / "c_three.wem").exists()


def fake_decoder(tmp_path, body):
    decoder = tmp_path / "fake-vgmstream"
    decoder.write_text("#!/bin/sh\n" + body)
    decoder.chmod(decoder.stat().st_mode | stat.S_IXUSR)
    return decoder


@pytest.mark.skipif(os.name == "nt", reason="shell script decoder")
def test_convert_failure_reports_decoder_stderr(tmp_path, capsys):
    decoder = fake_decoder(tmp_path, 'echo "unsupported codec" >&2\nexit 1\n')
    out_dir = tmp_path / "out"
    populate(out_dir, ["a_one.wem"])

    results = convert_extracted(out_dir, VgmstreamTranscoder(str(decoder)))

    assert results == {"a_one.wem": "CONVERT_FAILED"}
    assert "Error converting a_one.wem to a_one.wav: unsupported codec" in capsys.readouterr().out


@pytest.mark.skipif(os.name == "nt", reason="shell script decoder")
def test_convert_survives_undecodable_stderr(tmp_path):
    decoder = fake_decoder(tmp_path, "printf 'bad \\377\\376 bytes' >&2\nexit 1\n")
    out_dir = tmp_path / "out"
    populate(out_dir, ["a_one.wem", "b_two.wem"])

    results = convert_extracted(out_dir, VgmstreamTranscoder(str(decoder)))

    assert results == {"a_one.wem": "CONVERT_FAILED", "b_two.wem": "CONVERT_FAILED"}
