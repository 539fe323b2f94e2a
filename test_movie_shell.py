"""
Tests for Movie Writer - Imperative Shell

FFmpeg is never started: subprocess.Popen is patched with a mock process
that records the bytes written to its stdin, and the stderr log is an
in-memory buffer. Only the stderr test spawns a real (Python) child.
"""

import io
import sys
import threading
from unittest.mock import MagicMock, patch

import pytest
from color_types import Color, RED, BLUE
from image_shell import PixelBuffer
from movie_shell import DEFAULT_FPS, Movie, build_ffmpeg_command
from problems import EncodeError, InvalidArgumentError


# ============================================================================
# Test Fixtures
# ============================================================================

class FakeStdin(io.BytesIO):
    """In-memory pipe that stays readable after close()"""

    was_closed = False

    def close(self):
        self.was_closed = True


@pytest.fixture
def fake_process():
    """Mock FFmpeg process that exits successfully"""
    process = MagicMock()
    process.stdin = FakeStdin()
    process.wait.return_value = 0
    return process


@pytest.fixture
def stderr_log():
    """In-memory stand-in for the temporary file collecting FFmpeg stderr"""
    log = io.BytesIO()
    with patch('movie_shell.tempfile.TemporaryFile', return_value=log):
        yield log


@pytest.fixture
def popen(fake_process, stderr_log):
    with patch('movie_shell.subprocess.Popen', return_value=fake_process) as mock_popen:
        yield mock_popen


@pytest.fixture
def frame() -> PixelBuffer:
    return PixelBuffer.create_empty(4, 2, RED)


# ============================================================================
# Command Building
# ============================================================================

class TestBuildCommand:
    """Test pure FFmpeg command construction"""

    def test_reads_raw_rgb_from_stdin(self):
        cmd = build_ffmpeg_command("out.mp4", 480, 270, 25)

        assert cmd[0] == 'ffmpeg'
        assert cmd[cmd.index('-s') + 1] == '480x270'
        assert cmd[cmd.index('-pix_fmt') + 1] == 'rgb24'
        assert cmd[cmd.index('-i') + 1] == '-'
        assert cmd[cmd.index('-r') + 1] == '25'

    def test_h264_without_audio(self):
        cmd = build_ffmpeg_command("out.mp4", 480, 270, 25, preset="fast", crf=18)

        assert 'libx264' in cmd
        assert '-an' in cmd
        assert cmd[cmd.index('-preset') + 1] == 'fast'
        assert cmd[cmd.index('-crf') + 1] == '18'

    def test_only_errors_are_logged(self):
        cmd = build_ffmpeg_command("out.mp4", 480, 270, 25)

        assert cmd[cmd.index('-loglevel') + 1] == 'error'
        assert '-nostats' in cmd

    def test_output_is_last(self):
        assert build_ffmpeg_command("movie.mp4", 2, 2, 30)[-1] == 'movie.mp4'


# ============================================================================
# Movie Lifecycle
# ============================================================================

class TestMovie:
    """Test frame writing and finalization"""

    def test_create_mp4_defaults(self):
        movie = Movie.create_mp4("out.mp4")

        assert movie.fps == DEFAULT_FPS == 25
        assert movie.process is None

    def test_invalid_fps(self):
        with pytest.raises(InvalidArgumentError):
            Movie("out.mp4", fps=0)

    def test_none_path(self):
        with pytest.raises(InvalidArgumentError):
            Movie.create_mp4(None)

    def test_first_frame_starts_ffmpeg_with_its_size(self, popen, frame):
        Movie.create_mp4("out.mp4").add_frame(frame)

        cmd = popen.call_args[0][0]
        assert cmd[cmd.index('-s') + 1] == '4x2'

    def test_frames_are_written_as_rgb24(self, popen, fake_process, frame):
        movie = Movie.create_mp4("out.mp4")
        movie.add_frame(frame).add_frame(frame)

        data = fake_process.stdin.getvalue()
        assert len(data) == 2 * 4 * 2 * 3
        assert data[:3] == bytes([255, 0, 0])
        assert movie.frames_written == 2

    def test_ffmpeg_started_once(self, popen, frame):
        movie = Movie.create_mp4("out.mp4")
        for _ in range(3):
            movie.add_frame(frame)

        assert popen.call_count == 1

    def test_frame_size_mismatch(self, popen, frame):
        movie = Movie.create_mp4("out.mp4").add_frame(frame)

        with pytest.raises(InvalidArgumentError, match="4x2"):
            movie.add_frame(PixelBuffer.create_empty(2, 4, BLUE))

    def test_none_frame(self, popen):
        with pytest.raises(InvalidArgumentError):
            Movie.create_mp4("out.mp4").add_frame(None)

    def test_finish_closes_and_waits(self, popen, fake_process, frame):
        movie = Movie.create_mp4("out.mp4").add_frame(frame)

        movie.finish()

        assert fake_process.stdin.was_closed
        fake_process.wait.assert_called_once()
        assert movie.process is None

    def test_finish_without_frames(self):
        with pytest.raises(EncodeError):
            Movie.create_mp4("out.mp4").finish()

    def test_add_after_finish(self, popen, frame):
        movie = Movie.create_mp4("out.mp4").add_frame(frame)
        movie.finish()

        with pytest.raises(EncodeError, match="already finished"):
            movie.add_frame(frame)

    def test_ffmpeg_failure_reported(self, popen, fake_process, stderr_log, frame):
        fake_process.wait.return_value = 1
        stderr_log.write(b"Unknown encoder 'libx264'")
        movie = Movie.create_mp4("out.mp4").add_frame(frame)

        with pytest.raises(EncodeError, match="libx264"):
            movie.finish()

    def test_broken_pipe(self, popen, fake_process, stderr_log, frame):
        fake_process.stdin = MagicMock()
        fake_process.stdin.write.side_effect = BrokenPipeError()
        stderr_log.write(b"crashed")

        with pytest.raises(EncodeError, match="crashed"):
            Movie.create_mp4("out.mp4").add_frame(frame)

    def test_ffmpeg_missing(self, frame):
        with patch('movie_shell.subprocess.Popen', side_effect=FileNotFoundError()):
            with pytest.raises(EncodeError, match="FFmpeg not found"):
                Movie.create_mp4("out.mp4").add_frame(frame)

    def test_context_manager_finishes(self, popen, fake_process, frame):
        with Movie.create_mp4("out.mp4") as movie:
            movie.add_frame(frame)

        fake_process.wait.assert_called_once()
        assert movie.process is None

    def test_context_manager_does_not_hide_errors(self, popen, fake_process, frame):
        with pytest.raises(RuntimeError, match="boom"):
            with Movie.create_mp4("out.mp4") as movie:
                movie.add_frame(frame)
                raise RuntimeError("boom")

        fake_process.wait.assert_called_once()

    def test_verbose_prints_summary(self, popen, frame, capsys):
        movie = Movie.create_mp4("out.mp4", verbose=True)
        movie.add_frame(frame)
        movie.finish()

        out = capsys.readouterr().out
        assert "Starting FFmpeg encoder" in out
        assert "Encoded 1 frames successfully" in out

    def test_alpha_is_dropped_from_frames(self, popen, fake_process):
        frame = PixelBuffer.decode(PixelBuffer.create_empty(1, 1, Color(9, 8, 7)).to_bytes("png"))
        Movie.create_mp4("out.mp4").add_frame(frame)

        assert fake_process.stdin.getvalue() == bytes([9, 8, 7])


# ============================================================================
# Real Child Process
# ============================================================================

def flooding_child(exit_code: int):
    """Command for a child that writes 1 MB to stderr before reading stdin"""
    script = (
        "import sys\n"
        "sys.stderr.write('x' * 1000000 + '\\nfatal: done talking\\n')\n"
        "sys.stderr.flush()\n"
        "sys.stdin.buffer.read()\n"
        f"sys.exit({exit_code})\n"
    )
    return [sys.executable, '-c', script]


class TestStderrFlood:
    """Test that a talkative encoder cannot stall frame writing"""

    def encode_in_background(self, cmd):
        outcome = []

        def encode():
            movie = Movie.create_mp4("out.mp4")
            try:
                for _ in range(5):
                    movie.add_frame(PixelBuffer.create_empty(200, 200, BLUE))
                movie.finish()
                outcome.append("finished")
            except EncodeError as e:
                outcome.append(e)

        with patch('movie_shell.build_ffmpeg_command', return_value=cmd):
            worker = threading.Thread(target=encode, daemon=True)
            worker.start()
            worker.join(timeout=30)

        assert not worker.is_alive(), "encoding stalled"
        return outcome

    def test_frames_written_while_child_floods_stderr(self):
        assert self.encode_in_background(flooding_child(0)) == ["finished"]

    def test_flooded_stderr_still_reported_on_failure(self):
        outcome = self.encode_in_background(flooding_child(1))

        assert len(outcome) == 1
        assert isinstance(outcome[0], EncodeError)
        assert "fatal: done talking" in str(outcome[0])
