from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer

from otactl.cli.context import CLIContext, make_context
from otactl.core.config import AccountConfig, Config
from otactl.core.errors import ErrorCode
from otactl.output.console import MockConsole
from otactl.services.storage import MemoryAccountStorage

ME = "me@example.com"


@pytest.fixture
def ctx(monkeypatch: pytest.MonkeyPatch) -> CLIContext:
    import otactl.cli.commands.release_cmd as release_cmd

    context = make_context(
        config=Config(account=AccountConfig(email=ME)),
        console=MockConsole(),
        storage=MemoryAccountStorage(current_account=ME),
    )
    context.accounts.add_app("MyApp").unwrap()
    monkeypatch.setattr(release_cmd, "build_context", lambda: context)
    return context


def _console(ctx: CLIContext) -> MockConsole:
    assert isinstance(ctx.console, MockConsole)
    return ctx.console


def _bundle(tmp_path: Path, content: str = "console.log(1)") -> Path:
    path = tmp_path / "main.jsbundle"
    path.write_text(content, encoding="utf-8")
    return path


def _release(
    path: Path,
    *,
    app_name: str = "MyApp",
    version: str = "1.0.0",
    deployment: str = "Staging",
    disabled: str | None = None,
    mandatory: str | None = None,
    rollout: str | None = None,
    no_duplicate: bool = False,
) -> None:
    from otactl.cli.commands.release_cmd import release

    release(
        app_name=app_name,
        update_contents_path=path,
        target_binary_version=version,
        deployment_name=deployment,
        description=None,
        disabled=disabled,
        mandatory=mandatory,
        rollout=rollout,
        no_duplicate_release_error=no_duplicate,
    )


def _patch(**kw: object) -> None:
    from otactl.cli.commands.release_cmd import patch

    args: dict[str, object] = {
        "app_name": "MyApp",
        "deployment_name": "Staging",
        "label": None,
        "description": None,
        "disabled": None,
        "mandatory": None,
        "rollout": None,
        "target_binary_version": None,
    }
    args.update(kw)
    patch(**args)  # type: ignore[arg-type]


def _exit_code(fn: object, *args: object, **kw: object) -> int:
    with pytest.raises(typer.Exit) as exc:
        fn(*args, **kw)  # type: ignore[operator]
    return exc.value.exit_code


def _history(ctx: CLIContext, deployment: str = "Staging") -> list[dict[str, object]]:
    packages = ctx.releases.history(app_name="MyApp", deployment_name=deployment).unwrap()
    return [p.to_wire() for p in packages]


class TestRelease:
    def test_release_file(self, ctx: CLIContext, tmp_path: Path) -> None:
        path = _bundle(tmp_path)
        _release(path)

        assert _console(ctx).messages == [
            f'Successfully released an update containing the "{path}" file to the '
            '"Staging" deployment of the "MyApp" app.'
        ]
        history = _history(ctx)
        assert [(p["label"], p["rollout"], p["releaseMethod"]) for p in history] == [
            ("v1", 100, "Upload")
        ]

    def test_release_directory_with_options(self, ctx: CLIContext, tmp_path: Path) -> None:
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "index.js").write_text("x", encoding="utf-8")

        _release(tmp_path / "dist", mandatory="true", rollout="25%", version="^1.0.0")

        assert "directory" in _console(ctx).messages[0]
        (package,) = _history(ctx)
        assert package["isMandatory"] is True
        assert package["rollout"] == 25
        assert package["appVersion"] == "^1.0.0"

    def test_missing_bundle(self, ctx: CLIContext, tmp_path: Path) -> None:
        code = _exit_code(_release, tmp_path / "missing")
        assert code == int(ErrorCode.NOT_FOUND)
        assert _console(ctx).messages[0].startswith('[Error]  Unable to find or read "')

    def test_invalid_boolean(self, ctx: CLIContext, tmp_path: Path) -> None:
        code = _exit_code(_release, _bundle(tmp_path), disabled="maybe")
        assert code == int(ErrorCode.USER_ERROR)
        assert _history(ctx) == []

    def test_invalid_rollout(self, ctx: CLIContext, tmp_path: Path) -> None:
        assert _exit_code(_release, _bundle(tmp_path), rollout="150") == int(
            ErrorCode.USER_ERROR
        )

    def test_invalid_semver(self, ctx: CLIContext, tmp_path: Path) -> None:
        code = _exit_code(_release, _bundle(tmp_path), version="one")
        assert code == int(ErrorCode.USER_ERROR)
        assert '"one" is not a valid target binary version range.' in _console(ctx).text

    def test_unknown_app(self, ctx: CLIContext, tmp_path: Path) -> None:
        code = _exit_code(_release, _bundle(tmp_path), app_name="Other")
        assert code == int(ErrorCode.NOT_FOUND)
        assert _console(ctx).messages[0] == '[Error]  App "Other" does not exist.'

    def test_identical_release(self, ctx: CLIContext, tmp_path: Path) -> None:
        path = _bundle(tmp_path)
        _release(path)
        assert _exit_code(_release, path) == int(ErrorCode.CONFLICT)

    def test_identical_release_with_no_duplicate_error(
        self, ctx: CLIContext, tmp_path: Path
    ) -> None:
        path = _bundle(tmp_path)
        _release(path)
        _console(ctx).clear()

        _release(path, no_duplicate=True)

        assert _console(ctx).has_warning()
        assert not _console(ctx).has_error()
        assert len(_history(ctx)) == 1

    def test_binary_rejected(self, ctx: CLIContext, tmp_path: Path) -> None:
        archive = tmp_path / "bundle.zip"
        archive.write_bytes(b"PK\x05\x06" + b"\x00" * 18)
        code = _exit_code(_release, archive)
        assert code == int(ErrorCode.USER_ERROR)
        assert _history(ctx) == []


class TestRolloutScenario:
    def test_partial_rollout_blocks_until_completed(
        self, ctx: CLIContext, tmp_path: Path
    ) -> None:
        first = tmp_path / "a.js"
        first.write_text("a", encoding="utf-8")
        second = tmp_path / "b.js"
        second.write_text("b", encoding="utf-8")

        _release(first, rollout="50")
        assert _exit_code(_release, second) == int(ErrorCode.STATE_ERROR)
        assert "100% rollout" in _console(ctx).text

        _patch(rollout="100")
        _release(second)

        assert [p["label"] for p in _history(ctx)] == ["v1", "v2"]

    def test_patch_cannot_decrease(self, ctx: CLIContext, tmp_path: Path) -> None:
        _release(_bundle(tmp_path), rollout="50")
        assert _exit_code(_patch, rollout="40") == int(ErrorCode.STATE_ERROR)
        assert 'greater than "50"' in _console(ctx).text


class TestPatch:
    def test_patch_label(self, ctx: CLIContext, tmp_path: Path) -> None:
        _release(_bundle(tmp_path))
        _patch(label="v1", description="hello", disabled="yes")

        assert _console(ctx).messages[-1] == (
            'Successfully updated the "v1" release of "MyApp" app\'s "Staging" deployment.'
        )
        (package,) = _history(ctx)
        assert package["description"] == "hello"
        assert package["isDisabled"] is True

    def test_patch_nothing(self, ctx: CLIContext, tmp_path: Path) -> None:
        _release(_bundle(tmp_path))
        assert _exit_code(_patch, label="v1") == int(ErrorCode.USER_ERROR)
        assert "At least one property" in _console(ctx).text

    def test_patch_no_releases(self, ctx: CLIContext) -> None:
        assert _exit_code(_patch, description="x") == int(ErrorCode.STATE_ERROR)


class TestPromoteAndRollback:
    def test_promote(self, ctx: CLIContext, tmp_path: Path) -> None:
        from otactl.cli.commands.release_cmd import promote

        _release(_bundle(tmp_path))
        promote(
            app_name="MyApp",
            source_deployment_name="Staging",
            destination_deployment_name="Production",
            description=None,
            disabled=None,
            mandatory="true",
            rollout=None,
            target_binary_version=None,
            no_duplicate_release_error=False,
        )

        assert _console(ctx).messages[-1] == (
            'Successfully promoted the "Staging" deployment of the "MyApp" app to the '
            '"Production" deployment.'
        )
        (package,) = _history(ctx, "Production")
        assert package["releaseMethod"] == "Promote"
        assert package["isMandatory"] is True

    def test_promote_empty_source(self, ctx: CLIContext) -> None:
        from otactl.cli.commands.release_cmd import promote

        code = _exit_code(
            promote,
            app_name="MyApp",
            source_deployment_name="Staging",
            destination_deployment_name="Production",
            description=None,
            disabled=None,
            mandatory=None,
            rollout=None,
            target_binary_version=None,
            no_duplicate_release_error=False,
        )
        assert code == int(ErrorCode.STATE_ERROR)

    def test_rollback(self, ctx: CLIContext, tmp_path: Path) -> None:
        from otactl.cli.commands.release_cmd import rollback

        _release(_bundle(tmp_path, "a"))
        _release(_bundle(tmp_path, "b"))
        rollback(app_name="MyApp", deployment_name="Staging", target_release=None)

        history = _history(ctx)
        assert [p["label"] for p in history] == ["v1", "v2", "v3"]
        assert history[2]["packageHash"] == history[0]["packageHash"]
        assert history[2]["releaseMethod"] == "Rollback"
        assert "Successfully performed a rollback" in _console(ctx).messages[-1]

    def test_rollback_already_latest(self, ctx: CLIContext, tmp_path: Path) -> None:
        from otactl.cli.commands.release_cmd import rollback

        _release(_bundle(tmp_path, "a"))
        _release(_bundle(tmp_path, "b"))
        code = _exit_code(
            rollback, app_name="MyApp", deployment_name="Staging", target_release="v2"
        )
        assert code == int(ErrorCode.STATE_ERROR)
        assert json.dumps(_history(ctx)).count('"label"') == 2
