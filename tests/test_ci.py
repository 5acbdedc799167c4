"""End-to-end tests for fetch_and_install."""

from pathlib import Path

import pytest

from conftest import GemServer, make_gem, run
from gemfetch import ci
from gemfetch.cache import Cache
from gemfetch.errors import BadBundlePathError, BadRemoteError, DownloadError
from gemfetch.lockfile import GemfileLock


def installed_files(root: Path) -> set[str]:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


@pytest.fixture
def server(demo_gem):
    return GemServer(
        {
            "demo-1.0.gem": demo_gem,
            "other-2.1.3.gem": make_gem({"lib/other.rb": b"other"}),
        }
    )


async def fetch_and_install(server, lockfile, cache, install_root, limit=10):
    async with server.client() as client:
        await ci.fetch_and_install(lockfile, cache, install_root, limit, client)


class TestFetchAndInstall:
    """Tests for fetch_and_install."""

    def test_installs_lockfile(self, tmp_path, cache, lockfile, server):
        """Test downloading and unpacking every gem in the lockfile."""
        install_root = tmp_path / "bundle"

        run(fetch_and_install(server, lockfile, cache, install_root))

        assert installed_files(install_root) == {
            "specifications/demo-1.0.gemspec",
            "specifications/other-2.1.3.gemspec",
            "gems/demo-1.0/lib/foo.rb",
            "gems/other-2.1.3/lib/other.rb",
        }

    def test_second_run_uses_cache(self, tmp_path, cache, lockfile, server):
        """Test that a second run with the same cache makes no requests."""
        run(fetch_and_install(server, lockfile, cache, tmp_path / "first"))
        assert len(server.requests) == 2

        run(fetch_and_install(server, lockfile, cache, tmp_path / "second"))

        assert len(server.requests) == 2
        assert installed_files(tmp_path / "first") == installed_files(tmp_path / "second")

    def test_temporary_cache(self, tmp_path, lockfile, server):
        """Test installing through a temporary cache."""
        cache = Cache.temp().init()

        run(fetch_and_install(server, lockfile, cache, tmp_path / "bundle"))

        assert (tmp_path / "bundle" / "gems" / "demo-1.0" / "lib" / "foo.rb").exists()

    def test_failed_download_installs_nothing(self, tmp_path, cache, server):
        """Test that a failing download aborts before anything is unpacked."""
        lockfile = GemfileLock.from_dict(
            {
                "gem": [
                    {
                        "remote": "https://gems.example.com/",
                        "specs": [
                            {"name": "demo", "version": "1.0"},
                            {"name": "missing", "version": "0.1"},
                        ],
                    }
                ]
            }
        )

        with pytest.raises(DownloadError):
            run(fetch_and_install(server, lockfile, cache, tmp_path / "bundle"))

        assert not (tmp_path / "bundle").exists()

    def test_bad_remote(self, tmp_path, cache, server):
        """Test that an invalid remote aborts the run."""
        lockfile = GemfileLock.from_dict(
            {"gem": [{"remote": "not-a-url", "specs": [{"name": "demo", "version": "1.0"}]}]}
        )

        with pytest.raises(BadRemoteError):
            run(fetch_and_install(server, lockfile, cache, tmp_path / "bundle"))

        assert server.requests == []

    def test_install_root_from_bundler(self, tmp_path, monkeypatch, cache, lockfile, server):
        """Test that the install root is asked from Bundler when not given."""
        monkeypatch.setattr(ci, "find_bundle_path", lambda: tmp_path / "from-bundler")

        run(fetch_and_install(server, lockfile, cache, None))

        assert (tmp_path / "from-bundler" / "specifications" / "demo-1.0.gemspec").exists()

    def test_bundler_failure(self, monkeypatch, cache, lockfile, server):
        """Test that a failing install path lookup propagates."""

        def fail():
            raise BadBundlePathError()

        monkeypatch.setattr(ci, "find_bundle_path", fail)

        with pytest.raises(BadBundlePathError):
            run(fetch_and_install(server, lockfile, cache, None))
