import subprocess
import sys

import pytest

from streamfetch.process.command import Command, ProcessStreamParams, SpawnedCommand


def python(code):
    return Command(sys.executable).args(["-c", code])


def test_builder_collects_arguments():
    command = Command("prog").args(["a", "b"]).arg("c")
    assert command.program == "prog"
    assert command.arguments == ("a", "b", "c")
    assert command.stderr is None


def test_stderr_handle_is_stored():
    command = Command("prog").stderr_handle(subprocess.DEVNULL)
    assert command.stderr == subprocess.DEVNULL


def test_spawn_reads_stdout():
    spawned = python("import sys; sys.stdout.write('hello')").spawn()
    try:
        assert spawned.stdout.read() == b"hello"
        assert spawned.wait() == 0
    finally:
        spawned.close()


def test_binary_output_round_trip():
    code = "import sys; sys.stdout.buffer.write(bytes(range(256)))"
    with python(code).spawn() as spawned:
        assert spawned.stdout.read() == bytes(range(256))


def test_stderr_captured_in_temp_file():
    spawned = python("import sys; sys.stderr.write('oops'); sys.exit(3)").spawn()
    try:
        spawned.stdout.read()
        assert spawned.wait() == 3
        assert spawned.stderr_output() == ["oops"]
    finally:
        spawned.close()


def test_explicit_stderr_handle_skips_temp_file():
    command = python("import sys; sys.stderr.write('oops')").stderr_handle(
        subprocess.DEVNULL
    )
    with command.spawn() as spawned:
        spawned.stdout.read()
        spawned.wait()
        assert spawned.stderr_output() == []


def test_missing_program_raises():
    with pytest.raises(OSError, match="error spawning process"):
        Command("definitely-missing-program-for-tests").spawn()


def test_kill_stops_running_process():
    spawned = python("import time; time.sleep(30)").spawn()
    try:
        spawned.kill()
        assert spawned.process.returncode == spawned.wait()
        assert spawned.wait() != 0
    finally:
        spawned.close()


def test_close_kills_and_releases_stderr():
    spawned = python("import time; time.sleep(30)").spawn()
    spawned.close()
    assert spawned.process.returncode not in (None, 0)
    assert spawned.stderr_output() == []


def test_context_manager_leaves_finished_process():
    with python("print('x', end='')").spawn() as spawned:
        assert spawned.stdout.read() == b"x"
        spawned.wait()
    assert spawned.process.returncode == 0


def test_process_stream_params_content_length():
    params = ProcessStreamParams(python("pass"))
    try:
        assert isinstance(params.command, SpawnedCommand)
        assert params.content_length is None
        assert params.with_content_length(1234) is params
        assert params.content_length == 1234
        assert params.with_content_length(None).content_length is None
    finally:
        params.command.close()


def test_process_stream_params_rejects_negative_length():
    params = ProcessStreamParams(python("pass"))
    try:
        with pytest.raises(ValueError):
            params.with_content_length(-1)
    finally:
        params.command.close()