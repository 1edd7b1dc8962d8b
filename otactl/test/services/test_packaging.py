"""Tests for bundle fingerprinting."""

from __future__ import annotations

import zipfile
from pathlib import Path

from otactl.core.result import Err, Ok
from otactl.services.packaging import describe_bundle, is_binary_bundle, manifest_hash


def _clock() -> int:
    return 42


def _write(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


class TestDescribeBundle:
    def test_single_file(self, tmp_path: Path) -> None:
        bundle = tmp_path / "main.jsbundle"
        bundle.write_text("console.log(1)", encoding="utf-8")

        result = describe_bundle(bundle, clock=_clock)

        assert isinstance(result, Ok)
        descriptor = result.value
        assert descriptor.path == str(bundle)
        assert descriptor.size == len("console.log(1)")
        assert descriptor.upload_time == 42
        assert not descriptor.is_directory
        assert not descriptor.is_binary

    def test_directory(self, tmp_path: Path) -> None:
        _write(tmp_path / "dist", {"index.js": "a", "assets/logo.png": "bb"})

        result = describe_bundle(tmp_path / "dist", clock=_clock)

        assert isinstance(result, Ok)
        assert result.value.is_directory
        assert result.value.size == 3

    def test_directory_hash_is_content_based(self, tmp_path: Path) -> None:
        _write(tmp_path / "one", {"a.js": "x", "b/c.js": "y"})
        _write(tmp_path / "two", {"b/c.js": "y", "a.js": "x"})
        _write(tmp_path / "three", {"a.js": "x", "b/c.js": "z"})

        one = describe_bundle(tmp_path / "one", clock=_clock).unwrap()
        two = describe_bundle(tmp_path / "two", clock=_clock).unwrap()
        three = describe_bundle(tmp_path / "three", clock=_clock).unwrap()

        assert one.package_hash == two.package_hash
        assert one.package_hash != three.package_hash

    def test_ignored_files_do_not_change_hash(self, tmp_path: Path) -> None:
        _write(tmp_path / "one", {"a.js": "x"})
        _write(tmp_path / "two", {"a.js": "x", ".DS_Store": "junk", "__MACOSX/a.js": "junk"})

        one = describe_bundle(tmp_path / "one", clock=_clock).unwrap()
        two = describe_bundle(tmp_path / "two", clock=_clock).unwrap()
        assert one.package_hash == two.package_hash

    def test_missing_path(self, tmp_path: Path) -> None:
        result = describe_bundle(tmp_path / "nope", clock=_clock)
        assert isinstance(result, Err)
        assert result.error.kind == "bundle_not_found"

    def test_empty_file(self, tmp_path: Path) -> None:
        bundle = tmp_path / "main.jsbundle"
        bundle.write_bytes(b"")

        result = describe_bundle(bundle, clock=_clock)
        assert isinstance(result, Err)
        assert result.error.kind == "bundle_empty"

    def test_empty_directory(self, tmp_path: Path) -> None:
        _write(tmp_path / "dist", {".DS_Store": "junk"})

        result = describe_bundle(tmp_path / "dist", clock=_clock)
        assert isinstance(result, Err)
        assert result.error.kind == "bundle_empty"

    def test_zip_is_flagged_binary(self, tmp_path: Path) -> None:
        archive = tmp_path / "bundle.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("index.js", "x")

        result = describe_bundle(archive, clock=_clock)
        assert isinstance(result, Ok)
        assert result.value.is_binary


class TestHelpers:
    def test_binary_by_suffix(self, tmp_path: Path) -> None:
        assert is_binary_bundle(tmp_path / "app.ipa")
        assert is_binary_bundle(tmp_path / "app.APK")

    def test_binary_by_magic(self, tmp_path: Path) -> None:
        disguised = tmp_path / "bundle.js"
        with zipfile.ZipFile(disguised, "w") as zf:
            zf.writestr("x", "y")
        assert is_binary_bundle(disguised)

    def test_plain_file_not_binary(self, tmp_path: Path) -> None:
        plain = tmp_path / "bundle.js"
        plain.write_text("x", encoding="utf-8")
        assert not is_binary_bundle(plain)

    def test_manifest_hash_is_order_independent(self) -> None:
        assert manifest_hash(["a:1", "b:2"]) == manifest_hash(["b:2", "a:1"])
