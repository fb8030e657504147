from apngify.apng import read_animation
from apngify.cli import format_file_size, main

from conftest import save_image


def test_format_file_size():
    assert format_file_size(5 * 1024 * 1024) == "5.00 MB"
    assert format_file_size(0) == "0.00 MB"


def test_convert(tmp_path, gradient, capsys):
    src = tmp_path / "in.png"
    src.write_bytes(save_image(gradient, "PNG"))
    out = tmp_path / "out.png"

    assert main([str(src), "--out", str(out)]) == 0
    stdout = capsys.readouterr().out
    assert "Decoding PNG" in stdout
    assert f"Saved: {out}" in stdout
    assert read_animation(out.read_bytes()).width == 64


def test_quiet(tmp_path, gradient, capsys):
    src = tmp_path / "in.bmp"
    src.write_bytes(save_image(gradient, "BMP"))
    out = tmp_path / "out.png"

    assert main([str(src), "--out", str(out), "--quiet"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1 and lines[0].startswith("Saved:")


def test_info(tmp_path, gradient, capsys):
    src = tmp_path / "in.png"
    src.write_bytes(save_image(gradient, "PNG"))
    out = tmp_path / "out.png"
    main([str(src), "--out", str(out), "--quiet"])
    capsys.readouterr()

    assert main([str(out), "--info"]) == 0
    stdout = capsys.readouterr().out
    assert "IHDR, acTL, fcTL, IDAT" in stdout
    assert "frames=1 plays=0" in stdout


def test_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "nope.png")]) == 1
    assert "Error: Input file not found" in capsys.readouterr().out


def test_unsupported_input(tmp_path, capsys):
    src = tmp_path / "song.mp3"
    src.write_bytes(b"ID3\x04\x00\x00")
    assert main([str(src)]) == 1
    assert "Error: Unsupported format" in capsys.readouterr().out


def test_budget_too_small(tmp_path, gradient, capsys):
    src = tmp_path / "in.png"
    src.write_bytes(save_image(gradient, "PNG"))
    assert main([str(src), "--max-mb", "0.00001", "--quiet"]) == 1
    assert "Error:" in capsys.readouterr().out


def test_unreadable_input(tmp_path, capsys):
    folder = tmp_path / "folder.png"
    folder.mkdir()
    assert main([str(folder), "--quiet"]) == 1
    assert "Error:" in capsys.readouterr().out
    assert main([str(folder), "--info"]) == 1
