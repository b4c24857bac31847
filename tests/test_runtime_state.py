import pytest

from crux.runtime_state import (
    CRUXD_VERSION,
    RELEASE_BASE_ENV,
    CommandError,
    DaemonInstallError,
    ExecResult,
    LimaDownloadError,
    RuntimeAlreadyRunningError,
    RuntimeConfigError,
    RuntimeDestroyError,
    RuntimeExecError,
    RuntimeFailure,
    RuntimeNotCreatedError,
    RuntimeNotRunningError,
    RuntimeStartError,
    RuntimeStopError,
    State,
    UnsupportedPlatformError,
    cruxd_download_url,
)


@pytest.mark.parametrize(
    "state, label",
    [(State.NOT_CREATED, "not created"), (State.STOPPED, "stopped"), (State.RUNNING, "running")],
)
def test_state_labels(state, label):
    assert str(state) == label
    assert f"{state}" == label


@pytest.mark.parametrize(
    "cls, message",
    [
        (UnsupportedPlatformError, "unsupported platform"),
        (RuntimeNotCreatedError, "runtime has not been created"),
        (RuntimeAlreadyRunningError, "runtime is already running"),
        (RuntimeNotRunningError, "runtime is not running"),
        (RuntimeStartError, "failed to start runtime"),
        (RuntimeStopError, "failed to stop runtime"),
        (RuntimeDestroyError, "failed to destroy runtime"),
        (RuntimeExecError, "failed to execute command in runtime"),
        (RuntimeConfigError, "failed to generate runtime configuration"),
        (LimaDownloadError, "failed to download lima"),
        (DaemonInstallError, "failed to install cruxd"),
    ],
)
def test_error_messages(cls, message):
    err = cls()
    assert str(err) == message
    assert isinstance(err, RuntimeFailure)


def test_error_with_detail():
    err = RuntimeStartError("unexpected runtime state: stopped")
    assert str(err) == "failed to start runtime: unexpected runtime state: stopped"
    assert err.detail == "unexpected runtime state: stopped"


def test_command_error_hides_output():
    err = CommandError("start", 3, "lots of noisy output")
    assert str(err) == 'runtime command "start" exited with code 3'
    assert err.output == "lots of noisy output"
    assert "noisy" not in str(err)
    assert isinstance(err, RuntimeFailure)


def test_exec_result_defaults():
    result = ExecResult()
    assert (result.stdout, result.stderr, result.exit_code) == ("", "", 0)
    assert ExecResult("out", "err", 1) == ExecResult(stdout="out", stderr="err", exit_code=1)


def test_cruxd_url_shape(monkeypatch):
    monkeypatch.delenv(RELEASE_BASE_ENV, raising=False)
    url = cruxd_download_url("aarch64")
    assert f"/v{CRUXD_VERSION}/" in url
    assert url.endswith("cruxd-linux-aarch64.tar.gz")


def test_cruxd_url_base_override(monkeypatch):
    monkeypatch.setenv(RELEASE_BASE_ENV, "https://mirror.example.com/releases/")
    url = cruxd_download_url("amd64")
    assert url.startswith("https://mirror.example.com/releases/v")
    assert "//v" not in url
    assert url.endswith("cruxd-linux-amd64.tar.gz")