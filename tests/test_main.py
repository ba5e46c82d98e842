import io
from types import SimpleNamespace

import pytest

import rmd.io
import rmd.main
from rmd.config import Settings
from rmd.errors import LaunchError, RenderError, TempDirError
from rmd.main import main, run
from rmd.style import HTML_SUFFIX, html_prefix

DOC = b"# Title\n\nfirst line\nsecond line\n\n| a | b |\n|---|---|\n| 1 | 2 |\n\n- [x] done\n"


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(rmd.main, "load_dotenv", lambda: None)


def convert(data, **kwargs):
    stdout = io.BytesIO()
    run(Settings(**kwargs), stdin=io.BytesIO(data), stdout=stdout)
    return stdout.getvalue()


def test_fragment_to_stdout():
    out = convert(b"# Hi\n")
    assert out.startswith(b"<h1>Hi</h1>")
    assert b"<html>" not in out


def test_styled_output_wraps_unstyled_output():
    prefix = html_prefix().encode("utf-8")
    suffix = HTML_SUFFIX.encode("utf-8")
    styled = convert(DOC, style=True)
    assert styled.startswith(prefix)
    assert styled.endswith(suffix)
    assert styled[len(prefix):-len(suffix)] == convert(DOC)


def test_empty_stdin():
    assert convert(b"") == b""
    assert convert(b"", style=True) == (html_prefix() + HTML_SUFFIX).encode("utf-8")


def test_reads_named_file(tmp_path):
    source = tmp_path / "doc.md"
    source.write_bytes(b"a\nb\n")
    assert b"<br />" in convert(b"ignored", input_path=str(source))


def test_preview_opens_file_then_removes_temp_dir(tmp_path, no_sleep, launcher):
    settings = Settings(preview=True, style=True, temp_dir=str(tmp_path), preview_delay=0.1)
    stdout = io.BytesIO()
    run(settings, stdin=io.BytesIO(b"# Hi\n"), stdout=stdout, launcher=launcher)

    assert stdout.getvalue() == b""
    [opened] = launcher.opened
    assert opened.name == "out.html"
    assert launcher.contents[0].startswith(html_prefix().encode("utf-8"))
    assert b"<h1>Hi</h1>" in launcher.contents[0]
    assert launcher.contents[0].endswith(HTML_SUFFIX.encode("utf-8"))
    assert no_sleep == [0.1]
    assert not opened.parent.exists()
    assert list(tmp_path.iterdir()) == []


def test_preview_launch_failure_still_cleans_up(tmp_path, no_sleep, launcher):
    launcher.error = LaunchError("no viewer")
    settings = Settings(preview=True, temp_dir=str(tmp_path))
    with pytest.raises(LaunchError):
        run(settings, stdin=io.BytesIO(b"# Hi\n"), launcher=launcher)
    assert list(tmp_path.iterdir()) == []


def test_preview_unusable_temp_dir_stops_before_rendering(monkeypatch, tmp_path, launcher):
    def fail_render(*args, **kwargs):
        pytest.fail("conversion must not start")

    monkeypatch.setattr(rmd.main, "render_markdown", fail_render)
    settings = Settings(preview=True, temp_dir=str(tmp_path / "missing"))
    with pytest.raises(TempDirError):
        run(settings, stdin=io.BytesIO(b"# Hi\n"), launcher=launcher)
    assert launcher.opened == []
    assert list(tmp_path.iterdir()) == []


def test_render_failure_skips_preview(monkeypatch, tmp_path, launcher):
    def broken_render(*args, **kwargs):
        raise RenderError("engine exploded")

    monkeypatch.setattr(rmd.main, "render_markdown", broken_render)
    settings = Settings(preview=True, temp_dir=str(tmp_path))
    with pytest.raises(RenderError):
        run(settings, stdin=io.BytesIO(b"# Hi\n"), launcher=launcher)
    assert launcher.opened == []
    assert list(tmp_path.iterdir()) == []


def test_main_preview_success(monkeypatch, tmp_path, no_sleep, launcher):
    source = tmp_path / "doc.md"
    source.write_bytes(b"# Hi\n")
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setenv("RMD_TMPDIR", str(temp_root))
    monkeypatch.setattr(rmd.main, "get_launcher", lambda: launcher)

    assert main(["-i", str(source), "-preview"]) == 0
    assert len(launcher.opened) == 1
    assert list(temp_root.iterdir()) == []


def test_main_unwritable_temp_dir_exits_non_zero(monkeypatch, tmp_path, capsys):
    source = tmp_path / "doc.md"
    source.write_bytes(b"# Hi\n")
    monkeypatch.setenv("RMD_TMPDIR", str(tmp_path / "missing"))

    assert main(["-i", str(source), "-preview"]) == 1
    assert "rmd: sink: error creating temp directory" in capsys.readouterr().err
    assert sorted(p.name for p in tmp_path.iterdir()) == ["doc.md"]


def test_main_missing_input(tmp_path, capsys):
    assert main(["-i", str(tmp_path / "missing.md")]) == 1
    assert "rmd: input: error opening input file" in capsys.readouterr().err


def test_main_bad_config(monkeypatch, capsys):
    monkeypatch.setenv("RMD_PREVIEW_DELAY", "soon")
    assert main([]) == 2
    assert "rmd: config:" in capsys.readouterr().err


def test_verbose_progress_goes_to_stderr(capsys):
    stdout = io.BytesIO()
    run(Settings(verbose=True), stdin=io.BytesIO(b"# Hi\n"), stdout=stdout)
    err = capsys.readouterr().err
    assert "[Step 1] Reading input..." in err
    assert "[Step 3] Rendering Markdown..." in err
    assert b"[Step" not in stdout.getvalue()


def test_main_binary_codec_is_config_error(monkeypatch, capsys):
    monkeypatch.setenv("RMD_ENCODING", "base64")
    assert main([]) == 2
    assert "rmd: config: RMD_ENCODING" in capsys.readouterr().err


def test_render_failure_in_preview_is_reported(monkeypatch, tmp_path, launcher, capsys):
    def broken_render(*args, **kwargs):
        raise RenderError("engine exploded")

    monkeypatch.setattr(rmd.main, "render_markdown", broken_render)
    settings = Settings(preview=True, temp_dir=str(tmp_path))
    with pytest.raises(RenderError):
        run(settings, stdin=io.BytesIO(b"# Hi\n"), launcher=launcher)
    assert "skip preview" in capsys.readouterr().err


def test_render_failure_without_preview_is_quiet(monkeypatch, capsys):
    def broken_render(*args, **kwargs):
        raise RenderError("engine exploded")

    monkeypatch.setattr(rmd.main, "render_markdown", broken_render)
    with pytest.raises(RenderError):
        run(Settings(), stdin=io.BytesIO(b"# Hi\n"), stdout=io.BytesIO())
    assert "skip preview" not in capsys.readouterr().err


class UnclosableSink(io.BytesIO):
    failed = False

    def close(self):
        if not self.failed:
            self.failed = True
            raise OSError("disk quota exceeded")
        super().close()


def test_temp_file_close_failure_is_render_error(monkeypatch, tmp_path, launcher, capsys):
    out_path = tmp_path / "out.html"

    def fake_open_sink(preview, stack, stdout=None, temp_dir=None):
        return UnclosableSink(), out_path

    monkeypatch.setattr(rmd.main, "open_sink", fake_open_sink)
    with pytest.raises(RenderError, match="error closing rendered output"):
        run(Settings(preview=True), stdin=io.BytesIO(b"# Hi\n"), launcher=launcher)
    assert launcher.opened == []
    assert "skip preview" in capsys.readouterr().err


def test_main_temp_file_close_failure_exits_non_zero(monkeypatch, tmp_path, capsys):
    source = tmp_path / "doc.md"
    source.write_bytes(b"# Hi\n")
    monkeypatch.setattr(
        rmd.main,
        "open_sink",
        lambda preview, stack, stdout=None, temp_dir=None: (UnclosableSink(), tmp_path / "out.html"),
    )
    assert main(["-i", str(source), "-preview"]) == 1
    assert "rmd: render: error closing rendered output" in capsys.readouterr().err


def test_preview_cleanup_failure_is_reported_not_fatal(monkeypatch, tmp_path, no_sleep, launcher, capsys):
    def refuse_rmtree(path):
        raise PermissionError(f"cannot remove {path}")

    monkeypatch.setattr(rmd.io, "shutil", SimpleNamespace(rmtree=refuse_rmtree))
    settings = Settings(preview=True, temp_dir=str(tmp_path))
    run(settings, stdin=io.BytesIO(b"# Hi\n"), launcher=launcher)

    assert len(launcher.opened) == 1
    assert "rmd: cleanup: error removing temporary directory" in capsys.readouterr().err


def test_main_cleanup_failure_keeps_exit_status(monkeypatch, tmp_path, no_sleep, launcher, capsys):
    source = tmp_path / "doc.md"
    source.write_bytes(b"# Hi\n")
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setenv("RMD_TMPDIR", str(temp_root))
    monkeypatch.setattr(rmd.main, "get_launcher", lambda: launcher)
    def busy_rmtree(path):
        raise OSError("device busy")

    monkeypatch.setattr(rmd.io, "shutil", SimpleNamespace(rmtree=busy_rmtree))

    assert main(["-i", str(source), "-preview"]) == 0
    assert "rmd: cleanup:" in capsys.readouterr().err
