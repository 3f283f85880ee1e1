from pathlib import Path
from typing import Dict

import pytest


def make_tree(root: Path, files: Dict[str, object]) -> Path:
    """Create *files* (relative path -> str or bytes) under *root*."""
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def sample_tree(tmp_path, monkeypatch):
    """The a.txt / .secret / sub/b.rs tree, with the cwd set to its root."""
    root = make_tree(
        tmp_path / "tree",
        {"a.txt": "hi", ".secret": "x", "sub/b.rs": "fn f(){}"},
    )
    monkeypatch.chdir(root)
    return root


@pytest.fixture(autouse=True)
def isolated_git_config(tmp_path_factory, monkeypatch):
    """Keep the user's global git excludes file out of every test."""
    config_home = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home
