from typing import Iterable, Iterator, List

from localmr.errors import ConfigurationError, InputReadError
from localmr.utils.logger import get_logger

Chunk = List[str]


class DataSplitter:
    """
    Responsible for splitting input text files into chunks of records
    that can be processed in parallel by map tasks.

    A record is one non-blank line. Blank and whitespace-only lines are
    skipped and do not count toward the chunk size. Every chunk holds
    exactly ``chunk_size`` records except possibly the last chunk of a file.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    def split(self, input_path: str, chunk_size: int) -> Iterator[Chunk]:
        """
        Lazily yield the chunks of one input file, in file order.

        Args:
            input_path (str): Path to a UTF-8 text file.
            chunk_size (int): Maximum number of records per chunk.

        Yields:
            Chunk: A list of records with trailing newlines removed.

        Raises:
            ConfigurationError: If chunk_size is not a positive integer.
            InputReadError: If the file cannot be opened or read.
        """
        if not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ConfigurationError(f"Chunk size must be a positive integer, got {chunk_size!r}")

        chunk: Chunk = []
        try:
            with open(input_path, 'r', encoding='utf-8') as input_file:
                for line in input_file:
                    if not line.strip():
                        continue
                    chunk.append(line.rstrip('\r\n'))
                    if len(chunk) == chunk_size:
                        yield chunk
                        chunk = []
        except (OSError, UnicodeDecodeError) as e:
            raise InputReadError(f"Cannot read input file {input_path}: {e}", path=input_path) from e

        # The last chunk takes the remainder of the file
        if chunk:
            yield chunk

    def split_all(self, input_paths: Iterable[str], chunk_size: int) -> List[Chunk]:
        """
        Read every input file in configured order and return all chunks.

        Chunks never span two files.

        Returns:
            List[Chunk]: Chunks in input-path order, then file order.
        """
        chunks: List[Chunk] = []
        for input_path in input_paths:
            file_chunks = list(self.split(input_path, chunk_size))
            records = sum(len(chunk) for chunk in file_chunks)
            self.logger.debug(
                f"Read {records} records from {input_path} into {len(file_chunks)} chunks"
            )
            chunks.extend(file_chunks)

        self.logger.info(
            f"Input split into {len(chunks)} chunks of up to {chunk_size} records"
        )
        return chunks
