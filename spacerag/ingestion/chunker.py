from typing import List, Optional, Sequence
from ..core.logger import logger
from ..core.exception import InputError

DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", " "]


class TextChunker:
    """
    Sliding-window splitter with natural-boundary preference.

    Consecutive chunks share exactly `chunk_overlap` characters and no chunk
    is longer than `chunk_size`, so `merge_chunks` restores the source text.
    A window's end is pulled back to the last separator (paragraph, line,
    sentence, word, in that order) found in the back half of the region the
    window advances over; otherwise it is a hard cut at `chunk_size`.

    Characters given up to natural breaks come out of one shared budget that
    stays below a single stride, so the chunk count is at most one more than
    the hard-cut count ceil((L - overlap) / (size - overlap)).
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: Optional[Sequence[str]] = None,
    ):
        if chunk_size <= 0:
            raise InputError("chunk_size must be positive")
        if chunk_overlap < 0:
            raise InputError("chunk_overlap must not be negative")
        if chunk_overlap >= chunk_size:
            raise InputError("chunk_overlap must be smaller than chunk_size")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = list(separators) if separators is not None else DEFAULT_SEPARATORS

    def _find_break(self, text: str, start: int, end: int, slack: int) -> int:
        # a break may give up fewer than `slack` characters
        stride = self.chunk_size - self.chunk_overlap
        lo = max(start + self.chunk_overlap + stride // 2, end - slack + 1)

        for sep in self.separators:
            pos = text.rfind(sep, lo, end)
            if pos != -1:
                return pos + len(sep)

        return end

    def split_text(self, text: str) -> List[str]:
        if text is None or not text.strip():
            raise InputError("Cannot chunk empty text")

        if len(text) <= self.chunk_size:
            return [text]

        stride = self.chunk_size - self.chunk_overlap
        chunks = []
        start = 0
        pulled_back = 0

        while True:
            end = start + self.chunk_size
            if end >= len(text):
                chunks.append(text[start:])
                break

            brk = self._find_break(text, start, end, stride - pulled_back)
            pulled_back += end - brk
            end = brk
            chunks.append(text[start:end])
            start = end - self.chunk_overlap

        logger.info(f"Split {len(text)} chars into {len(chunks)} chunks")
        return chunks


def merge_chunks(chunks: Sequence[str], overlap: int) -> str:
    """Inverse of TextChunker.split_text for the same overlap."""
    if not chunks:
        return ""
    return chunks[0] + "".join(chunk[overlap:] for chunk in chunks[1:])
