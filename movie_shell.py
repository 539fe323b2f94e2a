"""
Movie Writer - Imperative Shell

Creates a video from PixelBuffer frames by piping raw RGB data into an
FFmpeg subprocess (H.264 in an MP4 container, no audio).

Side effects:
- Spawns FFmpeg subprocess
- Writes frame data to its stdin pipe
- Collects FFmpeg diagnostics in a temporary file
- Creates the output video file
"""

import subprocess
import tempfile
from typing import IO, List, Optional

from image_shell import PixelBuffer
from problems import EncodeError, InvalidArgumentError, check_not_none


DEFAULT_FPS = 25


def build_ffmpeg_command(
    output_path: str,
    width: int,
    height: int,
    fps: int,
    preset: str = "medium",
    crf: int = 23,
    pix_fmt: str = "yuv420p"
) -> List[str]:
    """Build FFmpeg command line for raw RGB frames read from stdin

    Pure function that constructs the command from configuration.

    Returns:
        List of command arguments
    """
    return [
        'ffmpeg',
        '-y',  # Overwrite output
        '-loglevel', 'error',
        '-nostats',
        '-f', 'rawvideo',
        '-vcodec', 'rawvideo',
        '-s', f'{width}x{height}',
        '-pix_fmt', 'rgb24',
        '-r', str(fps),
        '-i', '-',  # Read video from stdin
        '-an',
        '-vcodec', 'libx264',
        '-preset', preset,
        '-crf', str(crf),
        '-pix_fmt', pix_fmt,
        '-movflags', '+faststart',
        output_path,
    ]


class Movie:
    """Video built frame by frame from PixelBuffer images

    FFmpeg is started lazily on the first frame, since the frame size
    is only known then. Every later frame must have the same size.

    Usage:
        with Movie.create_mp4("out.mp4") as movie:
            movie.add_frame(image).add_frame(other)
    """

    def __init__(
        self,
        output_path: str,
        fps: int = DEFAULT_FPS,
        preset: str = "medium",
        crf: int = 23,
        pix_fmt: str = "yuv420p",
        verbose: bool = False
    ):
        """Initialize movie writer

        Args:
            output_path: Path for output MP4 file
            fps: Frames per second
            preset: FFmpeg preset (ultrafast, fast, medium, slow, veryslow)
            crf: Constant Rate Factor (0-51, lower=better quality, 23=default)
            pix_fmt: Pixel format for output (yuv420p for compatibility)
            verbose: Print encoding progress
        """
        check_not_none(output_path, "movie path")
        if fps <= 0:
            raise InvalidArgumentError(f"Frame rate must be positive, got {fps}.")

        self.output_path = str(output_path)
        self.fps = fps
        self.preset = preset
        self.crf = crf
        self.pix_fmt = pix_fmt
        self.verbose = verbose

        self.width: Optional[int] = None
        self.height: Optional[int] = None
        self.process: Optional[subprocess.Popen] = None
        self._stderr_log: Optional[IO[bytes]] = None
        self.frames_written = 0

    @classmethod
    def create_mp4(cls, path: str, fps: int = DEFAULT_FPS, verbose: bool = False) -> 'Movie':
        """Create a new movie with MP4 container, H.264 video codec but no sound"""
        return cls(path, fps=fps, verbose=verbose)

    def _start(self, width: int, height: int) -> None:
        """Spawn FFmpeg for frames of the given size

        Raises:
            EncodeError: If FFmpeg cannot be started
        """
        self.width = width
        self.height = height
        cmd = build_ffmpeg_command(
            self.output_path, width, height, self.fps,
            preset=self.preset, crf=self.crf, pix_fmt=self.pix_fmt
        )

        if self.verbose:
            print(f"\n{'='*70}")
            print(f"Starting FFmpeg encoder...")
            print(f"  Output: {self.output_path}")
            print(f"  Resolution: {width}x{height} @ {self.fps}fps")
            print(f"  Codec: H.264 (preset={self.preset}, crf={self.crf})")
            print(f"{'='*70}\n")

        # A file, not a pipe: nobody drains stderr while frames are written
        self._stderr_log = tempfile.TemporaryFile()
        try:
            self.process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=self._stderr_log
            )
        except FileNotFoundError as e:
            self._close_stderr_log()
            raise EncodeError(
                "FFmpeg not found. Please install FFmpeg:\n"
                "  macOS: brew install ffmpeg\n"
                "  Linux: apt-get install ffmpeg\n"
                "  Windows: Download from https://ffmpeg.org/"
            ) from e
        except OSError as e:
            self._close_stderr_log()
            raise EncodeError(f"Failed to create new movie into '{self.output_path}' ({e}).") from e

    def _read_stderr_log(self) -> str:
        """Everything FFmpeg has written to stderr so far"""
        if self._stderr_log is None:
            return ""
        self._stderr_log.seek(0)
        return self._stderr_log.read().decode('utf-8', errors='replace')

    def _close_stderr_log(self) -> str:
        """Read and discard the stderr log"""
        stderr = self._read_stderr_log()
        if self._stderr_log is not None:
            self._stderr_log.close()
            self._stderr_log = None
        return stderr

    def add_frame(self, frame: PixelBuffer) -> 'Movie':
        """Add a new frame to the movie

        Args:
            frame: Image of the next frame

        Returns:
            This movie, to allow chaining

        Raises:
            InvalidArgumentError: If frame is None or its size differs from the first frame
            EncodeError: If FFmpeg cannot be started or has died
        """
        check_not_none(frame, "movie frame")

        if self.process is None:
            if self.frames_written > 0:
                raise EncodeError("Movie is already finished.")
            self._start(frame.width, frame.height)
        elif (frame.width, frame.height) != (self.width, self.height):
            raise InvalidArgumentError(
                f"Frame size mismatch: expected {self.width}x{self.height}, "
                f"got {frame.width}x{frame.height}."
            )

        try:
            self.process.stdin.write(frame.to_rgb_array().tobytes())
        except OSError as e:
            # FFmpeg process died
            stderr = self._read_stderr_log()
            raise EncodeError(f"Failed to add new frame: FFmpeg process failed:\n{stderr}") from e

        self.frames_written += 1
        if self.verbose and self.frames_written % 60 == 0:
            elapsed = self.frames_written / self.fps
            print(f"  Encoded {self.frames_written} frames ({elapsed:.1f}s)...",
                  end='\r', flush=True)
        return self

    def finish(self) -> None:
        """Flush and close the movie

        Raises:
            EncodeError: If nothing is being encoded or FFmpeg reports a failure
        """
        if self.process is None:
            raise EncodeError("Failed to finalize the movie: no frames added or already finished.")

        process, self.process = self.process, None
        try:
            process.stdin.close()
        except OSError as e:
            process.kill()
            process.wait()
            self._close_stderr_log()
            raise EncodeError(f"Failed to finalize the movie: {e}.") from e
        returncode = process.wait()
        stderr = self._close_stderr_log()

        if self.verbose:
            print()  # New line after progress
            if returncode == 0:
                print(f"✓ Encoded {self.frames_written} frames successfully")
                print(f"  Output: {self.output_path}")
            else:
                print(f"✗ FFmpeg exited with code {returncode}")

        if returncode != 0:
            raise EncodeError(
                f"Failed to finalize the movie: FFmpeg exited with code {returncode}:\n{stderr}"
            )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.process is not None:
            if exc_type is None:
                self.finish()
            else:
                try:
                    self.finish()
                except EncodeError as e:
                    if self.verbose:
                        print(f"Warning: Error during movie cleanup: {e}")
        return False  # Don't suppress exceptions
