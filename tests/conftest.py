from __future__ import annotations

import errno
import os
import sys

import pytest
import xattr

# test_walk_paths_deep_tree leaves a ~1100-level tree; pytest's tmp_path
# cleanup uses recursive shutil.rmtree, which needs a higher limit.
sys.setrecursionlimit(max(sys.getrecursionlimit(), 10000))


class FakeXattrs:
    """In-memory stand-in for the pyxattr get/set/remove calls."""

    def __init__(self) -> None:
        self.attrs: dict[str, dict[str, bytes]] = {}
        self.unreadable: set[str] = set()

    def _key(self, path) -> str:
        path = os.path.abspath(os.fspath(path))
        if not os.path.exists(path):
            raise OSError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        if path in self.unreadable:
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)
        return path

    def get(self, path, name):
        attrs = self.attrs.get(self._key(path), {})
        if name not in attrs:
            raise OSError(errno.ENODATA, os.strerror(errno.ENODATA), path)
        return attrs[name]

    def set(self, path, name, value):
        self.attrs.setdefault(self._key(path), {})[name] = bytes(value)

    def remove(self, path, name):
        attrs = self.attrs.get(self._key(path), {})
        if name not in attrs:
            raise OSError(errno.ENODATA, os.strerror(errno.ENODATA), path)
        del attrs[name]

    def stored(self, path, name: str = "user.tags") -> bytes | None:
        return self.attrs.get(os.path.abspath(os.fspath(path)), {}).get(name)


@pytest.fixture
def fake_xattr(monkeypatch: pytest.MonkeyPatch) -> FakeXattrs:
    fake = FakeXattrs()
    monkeypatch.setattr(xattr, "get", fake.get)
    monkeypatch.setattr(xattr, "set", fake.set)
    monkeypatch.setattr(xattr, "remove", fake.remove)
    return fake


@pytest.fixture
def tree(tmp_path):
    """root/a, root/b/c and an untagged root/d."""
    root = tmp_path / "root"
    (root / "b").mkdir(parents=True)
    (root / "a").write_text("a")
    (root / "b" / "c").write_text("c")
    (root / "d").write_text("d")
    return root
