import pytest


class RecordingLauncher:
    def __init__(self, error=None):
        self.error = error
        self.opened = []
        self.contents = []

    def open(self, path):
        self.opened.append(path)
        self.contents.append(path.read_bytes())
        if self.error is not None:
            raise self.error


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("RMD_PREVIEW_DELAY", "RMD_TMPDIR", "RMD_ENCODING"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr("rmd.launcher.time.sleep", delays.append)
    return delays


@pytest.fixture
def launcher():
    return RecordingLauncher()
