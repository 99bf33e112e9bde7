import os
import tempfile
from typing import Iterable

from localmr.errors import OutputWriteError
from localmr.models.context import Pair
from localmr.utils.logger import get_logger


class OutputWriter:
    """
    Writes the final pair sequence of a job to a text file.

    Output format is one line per pair, in sequence order:
    ``Key: <key> Value: <value>``

    Lines go to a temporary file next to the destination, which replaces
    ``output_path`` only once every pair is written. A failed write leaves
    any previous file at ``output_path`` untouched.
    """

    LINE_FORMAT = "Key: {key} Value: {value}\n"
    FILE_MODE = 0o644

    def __init__(self):
        self.logger = get_logger(__name__)

    def write(self, output_path: str, pairs: Iterable[Pair]) -> int:
        """
        Write every pair to ``output_path``, replacing any existing file.

        Args:
            output_path (str): Destination file. Parent directories are created.
            pairs (Iterable[Pair]): Final pairs in output order.

        Returns:
            int: Number of pairs written.

        Raises:
            OutputWriteError: If the directory or file cannot be written, or a
                pair cannot be formatted as text.
        """
        written = 0
        temp_path = None
        try:
            parent = os.path.dirname(output_path) or "."
            os.makedirs(parent, exist_ok=True)

            fd, temp_path = tempfile.mkstemp(prefix=".localmr-", suffix=".tmp", dir=parent)
            with os.fdopen(fd, 'w', encoding='utf-8') as output_file:
                for key, value in pairs:
                    output_file.write(self._format_checked(output_path, written + 1, key, value))
                    written += 1
                output_file.flush()
                os.fsync(output_file.fileno())

            os.chmod(temp_path, self.FILE_MODE)
            os.replace(temp_path, output_path)
            temp_path = None

        except OSError as e:
            self.logger.error(f"Error writing output file {output_path}: {e}")
            raise OutputWriteError(
                f"Cannot write output file {output_path}: {e}", path=output_path
            ) from e

        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.remove(temp_path)

        self.logger.info(f"Wrote {written} pairs to {output_path}")
        return written

    def format_pair(self, key, value) -> str:
        return self.LINE_FORMAT.format(key=key, value=value)

    def _format_checked(self, output_path: str, position: int, key, value) -> str:
        try:
            return self.format_pair(key, value)
        except Exception as e:
            self.logger.error(f"Cannot format pair {position} for {output_path}: {e}")
            raise OutputWriteError(
                f"Cannot format pair {position} as text: {type(e).__name__}: {e}",
                path=output_path,
            ) from e
