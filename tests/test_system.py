from ghexec.utils.system import detect_platform, read_os_release, run_executable


def write_os_release(tmp_path, text):
    path = tmp_path / "os-release"
    path.write_text(text)
    return str(path)


def test_read_os_release_handles_quotes_and_comments(tmp_path):
    path = write_os_release(
        tmp_path,
        '# comment\nNAME="Ubuntu"\nID=ubuntu\nVERSION_ID="22.04"\nPRETTY_NAME="Ubuntu 22.04.3 LTS"\n\n',
    )
    fields = read_os_release(path)
    assert fields["ID"] == "ubuntu"
    assert fields["VERSION_ID"] == "22.04"
    assert fields["PRETTY_NAME"] == "Ubuntu 22.04.3 LTS"


def test_read_os_release_missing_file(tmp_path):
    assert read_os_release(str(tmp_path / "missing")) == {}


def test_detect_ubuntu(tmp_path):
    path = write_os_release(tmp_path, 'ID=ubuntu\nVERSION_ID="22.04"\n')
    hint = detect_platform(path, system="Linux", machine="x86_64")
    assert hint.distro_version == "ubuntu22.04"
    assert hint.distro == "ubuntu"
    assert hint.kernel_tokens == ("linux",)
    assert hint.arch == "x86_64"


def test_detect_other_distro(tmp_path):
    path = write_os_release(tmp_path, "ID=Debian\nVERSION_ID=12\n")
    hint = detect_platform(path, system="Linux", machine="aarch64")
    assert hint.distro_version == "debian12"
    assert hint.distro == "debian"
    assert hint.arch == "aarch64"


def test_detect_rolling_distro_has_no_version(tmp_path):
    path = write_os_release(tmp_path, "ID=arch\n")
    hint = detect_platform(path, system="Linux", machine="x86_64")
    assert hint.distro == "arch"
    assert hint.distro_version is None


def test_detect_without_os_release(tmp_path):
    hint = detect_platform(str(tmp_path / "missing"), system="Linux", machine="AMD64")
    assert hint.distro is None
    assert hint.distro_version is None
    assert hint.kernel_tokens == ("linux",)
    assert hint.arch == "x86_64"


def test_detect_macos_ignores_os_release(tmp_path):
    path = write_os_release(tmp_path, "ID=ubuntu\nVERSION_ID=22.04\n")
    hint = detect_platform(path, system="Darwin", machine="arm64")
    assert hint.distro is None
    assert hint.kernel_tokens == ("darwin", "macos")
    assert hint.arch == "aarch64"


def test_run_executable_returns_exit_code(tmp_path):
    script = tmp_path / "tool"
    script.write_text('#!/bin/sh\nexit "$1"\n')
    script.chmod(0o755)
    assert run_executable(str(script), ["3"]) == 3
    assert run_executable(str(script), ["0"]) == 0
