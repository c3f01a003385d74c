"""
Input source handling

Opens TDV files and yields their lines without ever buffering more than
one bounded line at a time.
"""
from pathlib import Path
from typing import IO, Iterator, Union

from .exceptions import SourceUnreadable


# Chunk size used to skip the tail of an over-long line
_DRAIN_CHUNK = 4096


def open_source(path: Union[str, Path], encoding: str = "utf-8") -> IO[str]:
    """
    Open an input file for reading
    
    Args:
        path: File path
        encoding: Text encoding; undecodable bytes are replaced
    
    Returns:
        Open text stream
    
    Raises:
        SourceUnreadable: File could not be opened
    """
    try:
        return open(path, "r", encoding=encoding, errors="replace", newline="")
    except OSError as e:
        raise SourceUnreadable(str(path), e) from e


def iter_lines(stream: IO[str], max_line_length: int) -> Iterator[str]:
    """
    Yield lines from a stream with a bounded read per line
    
    A line longer than max_line_length is yielded truncated to
    max_line_length + 1 characters, so it still fails the parser's
    length check, and the rest of it is discarded in chunks.
    
    Args:
        stream: Text stream
        max_line_length: Longest accepted line, terminator excluded
    
    Yields:
        Lines, including their terminator when one was read
    """
    # Room for the content, one overflow character, and "\r\n"
    limit = max_line_length + 3
    
    while True:
        line = stream.readline(limit)
        if not line:
            return
        
        if len(line) == limit and not line.endswith(("\n", "\r")):
            _drain_line(stream)
            yield line[: max_line_length + 1]
            continue
        
        if len(line) == limit and line.endswith("\r"):
            _consume_split_lf(stream)
        
        yield line


def _consume_split_lf(stream: IO[str]) -> None:
    """Swallow the LF of a CRLF terminator cut off by the read limit"""
    # Unseekable streams cannot be peeked; the "\n" then reads as a blank line
    if not stream.seekable():
        return
    position = stream.tell()
    if stream.read(1) != "\n":
        stream.seek(position)


def _drain_line(stream: IO[str]) -> None:
    """Consume the remainder of the current line"""
    while True:
        chunk = stream.readline(_DRAIN_CHUNK)
        if not chunk or chunk.endswith(("\n", "\r")):
            return
