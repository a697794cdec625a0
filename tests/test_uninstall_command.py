from __future__ import annotations

import shutil
from pathlib import Path

import pytest
import yaml

from cask_core.caskroom import CaskroomLayout
from cask_core.config import CaskConfig
from cask_core.errors import (
    ActionError,
    ArtifactMissing,
    CaskError,
    MultipleCaskErrors,
    NoPackagesSpecified,
    PackageNotInstalled,
    PackageUnavailable,
)
from cask_core.installer import Installer
from cask_core.uninstall import Uninstaller, UninstallRequest, uninstall
from cask_core.versions import VersionStore


def _config(tmp_path: Path) -> CaskConfig:
    return CaskConfig.for_workspace(tmp_path / ".caskroom")


def _write_cask(config: CaskConfig, payload: dict) -> Path:
    path = config.taps[0] / "Casks" / f"{payload['cask']}.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


def _app_source(root: Path, app_name: str) -> Path:
    plist = root / app_name / "Contents" / "Info.plist"
    plist.parent.mkdir(parents=True, exist_ok=True)
    plist.write_text("<plist/>", encoding="utf-8")
    return root


def _add_caffeine(config: CaskConfig, tmp_path: Path) -> None:
    source = _app_source(tmp_path / "sources" / "caffeine", "Caffeine.app")
    _write_cask(
        config,
        {"cask": "local-caffeine", "version": "1.2.3", "source": str(source), "artifacts": [{"app": "Caffeine.app"}]},
    )


def _add_transmission(config: CaskConfig, tmp_path: Path) -> None:
    source = _app_source(tmp_path / "sources" / "transmission", "Transmission.app")
    _write_cask(
        config,
        {
            "cask": "local-transmission",
            "version": "2.61",
            "source": str(source),
            "artifacts": [{"app": "Transmission.app"}],
        },
    )


def _add_uninstall_script_app(config: CaskConfig, tmp_path: Path) -> Path:
    source = tmp_path / "sources" / "fancy"
    app = source / "MyFancyApp" / "MyFancyApp.app"
    app.mkdir(parents=True, exist_ok=True)
    script = app / "uninstall.sh"
    script.write_text('#!/bin/sh\nif [ -d "$1" ]; then touch "$2"; fi\n', encoding="utf-8")
    script.chmod(0o755)
    marker = tmp_path / "uninstall-script-ran"
    _write_cask(
        config,
        {
            "cask": "with-uninstall-script-app",
            "version": "1.2.3",
            "source": str(source),
            "artifacts": [
                {"app": "MyFancyApp/MyFancyApp.app"},
                {
                    "uninstall": {
                        "script": {
                            "executable": "{appdir}/MyFancyApp.app/uninstall.sh",
                            "args": ["{appdir}/MyFancyApp.app", str(marker)],
                        }
                    }
                },
            ],
        },
    )
    return marker


def _is_installed(config: CaskConfig, token: str) -> bool:
    return VersionStore(CaskroomLayout(config.caskroom)).is_installed(token)


def _tree(root: Path) -> list[str]:
    if not root.exists():
        return []
    return sorted(str(path.relative_to(root)) for path in root.rglob("*"))


def test_unknown_cask_is_unavailable(tmp_path: Path) -> None:
    config = _config(tmp_path)
    before = _tree(tmp_path)
    with pytest.raises(PackageUnavailable):
        uninstall("notacask", config=config)
    assert _tree(tmp_path) == before


def test_unknown_cask_is_unavailable_even_with_force(tmp_path: Path) -> None:
    config = _config(tmp_path)
    with pytest.raises(PackageUnavailable):
        uninstall("notacask", "--force", config=config)


def test_not_installed_cask_raises(tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_caffeine(config, tmp_path)
    before = _tree(tmp_path)
    with pytest.raises(PackageNotInstalled):
        uninstall("local-caffeine", config=config)
    assert _tree(tmp_path) == before


def test_force_tries_anyway_on_a_non_present_cask(tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_caffeine(config, tmp_path)
    report = uninstall("local-caffeine", "--force", config=config)
    assert report.ok
    assert report.outcomes[0].version == "1.2.3"


def test_uninstalls_multiple_casks_at_once(tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_caffeine(config, tmp_path)
    _add_transmission(config, tmp_path)
    installer = Installer(config)
    installer.install_token("local-caffeine")
    installer.install_token("local-transmission")
    assert _is_installed(config, "local-caffeine")
    assert _is_installed(config, "local-transmission")

    uninstall("local-caffeine", "local-transmission", config=config)

    assert not _is_installed(config, "local-caffeine")
    assert not (config.appdir / "Caffeine.app").exists()
    assert not _is_installed(config, "local-transmission")
    assert not (config.appdir / "Transmission.app").exists()
    assert not (config.caskroom / "local-caffeine").exists()


def test_runs_uninstall_script_before_removing_artifacts(tmp_path: Path) -> None:
    config = _config(tmp_path)
    marker = _add_uninstall_script_app(config, tmp_path)
    Installer(config).install_token("with-uninstall-script-app")
    assert (config.appdir / "MyFancyApp.app").exists()

    uninstall("with-uninstall-script-app", config=config)

    assert marker.exists()
    assert not _is_installed(config, "with-uninstall-script-app")
    assert not (config.appdir / "MyFancyApp.app").exists()


def test_missing_uninstall_script_requires_force(tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_uninstall_script_app(config, tmp_path)
    Installer(config).install_token("with-uninstall-script-app")
    assert _is_installed(config, "with-uninstall-script-app")

    shutil.rmtree(config.appdir / "MyFancyApp.app")

    with pytest.raises(CaskError, match="does not exist"):
        uninstall("with-uninstall-script-app", config=config)
    assert _is_installed(config, "with-uninstall-script-app")

    report = uninstall("with-uninstall-script-app", "--force", config=config)
    assert not _is_installed(config, "with-uninstall-script-app")
    (outcome,) = report.outcomes
    assert [type(failure) for failure in outcome.failures] == [ArtifactMissing]


def test_installed_and_not_installed_casks_are_processed_independently(tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_caffeine(config, tmp_path)
    _add_transmission(config, tmp_path)
    Installer(config).install_token("local-transmission")

    report = Uninstaller(config).run(UninstallRequest.build(["local-caffeine", "local-transmission"]))

    caffeine, transmission = report.outcomes
    assert isinstance(caffeine.error, PackageNotInstalled)
    assert transmission.ok
    assert not (config.appdir / "Transmission.app").exists()
    with pytest.raises(PackageNotInstalled):
        report.raise_for_failures()


def test_broken_cleanup_does_not_block_later_tokens(tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_caffeine(config, tmp_path)
    _write_cask(
        config,
        {
            "cask": "odd-cleanup",
            "version": "1.0",
            "artifacts": [{"uninstall": {"delete": ["{appdir}/odd{name"]}}],
        },
    )
    installer = Installer(config)
    installer.install_token("odd-cleanup")
    installer.install_token("local-caffeine")

    report = Uninstaller(config).run(UninstallRequest.build(["odd-cleanup", "local-caffeine"]))

    odd, caffeine = report.outcomes
    assert isinstance(odd.error, ActionError)
    assert "cannot expand" in str(odd.error)
    assert _is_installed(config, "odd-cleanup")
    assert caffeine.ok
    assert not _is_installed(config, "local-caffeine")
    assert not (config.appdir / "Caffeine.app").exists()


def test_prune_failure_is_reported_for_that_token_only(monkeypatch, tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_caffeine(config, tmp_path)
    _add_transmission(config, tmp_path)
    installer = Installer(config)
    installer.install_token("local-caffeine")
    installer.install_token("local-transmission")
    real_rmtree = shutil.rmtree

    def _rmtree(path, *args, **kwargs):
        if "local-caffeine" in str(path):
            raise PermissionError(13, "Permission denied", str(path))
        return real_rmtree(path, *args, **kwargs)

    monkeypatch.setattr(shutil, "rmtree", _rmtree)

    report = Uninstaller(config).run(UninstallRequest.build(["local-caffeine", "local-transmission"]))

    caffeine, transmission = report.outcomes
    assert isinstance(caffeine.error, ActionError)
    assert "failed to prune" in str(caffeine.error)
    assert transmission.ok
    assert not _is_installed(config, "local-transmission")


def test_several_failures_are_aggregated(tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_caffeine(config, tmp_path)
    _add_transmission(config, tmp_path)

    with pytest.raises(MultipleCaskErrors) as excinfo:
        uninstall("local-caffeine", "local-transmission", config=config)

    assert [type(error) for error in excinfo.value.errors] == [PackageNotInstalled, PackageNotInstalled]


def test_unknown_token_aborts_before_anything_is_removed(tmp_path: Path) -> None:
    config = _config(tmp_path)
    _add_caffeine(config, tmp_path)
    Installer(config).install_token("local-caffeine")

    with pytest.raises(PackageUnavailable):
        uninstall("local-caffeine", "notacask", config=config)

    assert _is_installed(config, "local-caffeine")
    assert (config.appdir / "Caffeine.app").exists()


class TestMultipleInstalledVersions:
    token = "versioned-cask"
    first_installed_version = "1.2.3"
    last_installed_version = "4.5.6"

    @pytest.fixture
    def config(self, tmp_path: Path) -> CaskConfig:
        config = _config(tmp_path)
        caskroom_path = config.caskroom / self.token
        for version, timestamp in ((self.first_installed_version, "123000"), (self.last_installed_version, "456000")):
            caskfile = caskroom_path / ".metadata" / version / timestamp / "Casks" / f"{self.token}.yml"
            caskfile.parent.mkdir(parents=True, exist_ok=True)
            caskfile.write_text(f"cask: {self.token}\nversion: '{version}'\n", encoding="utf-8")
            (caskroom_path / version).mkdir(parents=True, exist_ok=True)
        return config

    def test_uninstalls_one_version_at_a_time(self, config: CaskConfig) -> None:
        caskroom_path = config.caskroom / self.token

        uninstall(self.token, config=config, echo=lambda message: None)

        assert (caskroom_path / self.first_installed_version).exists()
        assert not (caskroom_path / self.last_installed_version).exists()
        assert caskroom_path.exists()

        uninstall(self.token, config=config, echo=lambda message: None)

        assert not (caskroom_path / self.first_installed_version).exists()
        assert not caskroom_path.exists()

    def test_displays_a_message_when_versions_remain_installed(
        self, config: CaskConfig, capsys: pytest.CaptureFixture[str]
    ) -> None:
        uninstall(self.token, config=config)

        captured = capsys.readouterr()
        assert f"{self.token} {self.first_installed_version} is still installed." in captured.out
        assert captured.err == ""


def test_can_still_uninstall_renamed_or_removed_casks(tmp_path: Path) -> None:
    config = _config(tmp_path)
    app = config.appdir / "ive-been-renamed.app"
    (app / "Contents").mkdir(parents=True, exist_ok=True)
    (app / "Contents" / "Info.plist").touch()
    caskroom_path = config.caskroom / "ive-been-renamed"
    saved_caskfile = caskroom_path / ".metadata" / "latest" / "timestamp" / "Casks" / "ive-been-renamed.yml"
    saved_caskfile.parent.mkdir(parents=True, exist_ok=True)
    saved_caskfile.write_text(
        "cask: ive-been-renamed\nversion: latest\nartifacts:\n  - app: ive-been-renamed.app\n",
        encoding="utf-8",
    )

    uninstall("ive-been-renamed", config=config)

    assert not app.exists()
    assert not caskroom_path.exists()


def test_raises_when_no_cask_is_specified(tmp_path: Path) -> None:
    with pytest.raises(NoPackagesSpecified):
        uninstall(config=_config(tmp_path))


def test_raises_when_only_an_invalid_option_is_given(tmp_path: Path) -> None:
    with pytest.raises(NoPackagesSpecified):
        uninstall("--notavalidoption", config=_config(tmp_path))


def test_request_parses_force_flags() -> None:
    request = UninstallRequest.from_args(["-f", "a", "b"])
    assert request.tokens == ("a", "b")
    assert request.force is True
