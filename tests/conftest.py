"""Shared fixtures: stand-in engine and post-processor scripts run through the shell."""

import sys
from pathlib import Path

import pytest

# Behaves like a LaTeX engine called as: engine <mode> %dir% %file%
FAKE_ENGINE = r'''
import os
import sys
import time

mode, directory, source = sys.argv[1], sys.argv[2], sys.argv[3]

counter = source + ".passes"
count = int(open(counter).read()) + 1 if os.path.exists(counter) else 1
with open(counter, "w") as f:
    f.write(str(count))

if mode == "hang":
    time.sleep(5)

if mode == "partial":
    with open(source + ".pdf", "wb") as f:
        f.write(b"%PDF-1.4 partial")
    if count >= 2:
        time.sleep(5)

for suffix in (".aux", ".log", ".out"):
    with open(source + suffix, "w") as f:
        f.write("side file")

print("This is FakeTeX, Version 3.141592653")
print("pass %d" % count)
print("dir %s" % directory)

if mode == "missfont":
    with open(os.path.join(directory, "missfont.log"), "w") as f:
        f.write("mktextfm ecrm1000\n")

if mode == "missfontdir":
    os.makedirs(os.path.join(directory, "missfont.log"), exist_ok=True)

if mode in ("texput", "missfontdir"):
    with open(os.path.join(directory, "texput.log"), "w") as f:
        f.write("! I can't find file\n")

if mode in ("ok", "missfont", "missfontdir", "texput", "failpdf"):
    with open(source + ".pdf", "wb") as f:
        f.write(b"%PDF-1.4 fake pass " + str(count).encode())

if mode == "fail":
    print("! Undefined control sequence.")
    sys.stderr.write("Emergency stop.\n")
    sys.exit(1)

if mode == "failpdf":
    print("! Missing $ inserted.")
    sys.exit(1)
'''

# Behaves like a post-processor called as: post <mode> %file%
FAKE_POST_PROCESSOR = r'''
import os
import sys

mode, pdf = sys.argv[1], sys.argv[2]

with open(os.path.join(os.path.dirname(pdf), "post.called"), "w") as f:
    f.write(pdf)

if mode == "fail":
    print("qpdf: unable to find trailer")
    sys.exit(2)

if mode == "delete":
    os.remove(pdf)
'''


def _script_command(script: Path, mode: str, args: str) -> str:
    return f'"{sys.executable}" "{script}" {mode} {args}'


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep temporary sources inside tmp_path and ignore any local .env overrides."""
    temp_dir = tmp_path / "temp"
    temp_dir.mkdir()
    monkeypatch.setenv("TEXWRAP_TEMP_DIR", str(temp_dir))
    for name in ("TEXWRAP_COMMAND", "TEXWRAP_PASSES", "TEXWRAP_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return temp_dir


@pytest.fixture
def engine_command(tmp_path):
    """Factory returning a command template for the fake engine in the given mode."""
    script = tmp_path / "fake_engine.py"
    script.write_text(FAKE_ENGINE)

    def _command(mode: str = "ok") -> str:
        return _script_command(script, mode, "%dir% %file%")

    return _command


@pytest.fixture
def post_command(tmp_path):
    """Factory returning a post-processing command for the fake post-processor."""
    script = tmp_path / "fake_post.py"
    script.write_text(FAKE_POST_PROCESSOR)

    def _command(mode: str = "ok") -> str:
        return _script_command(script, mode, "%file%")

    return _command


@pytest.fixture
def source_path(tmp_path):
    """Extension-less source path in its own directory."""
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    return work_dir / "doc"
