from __future__ import annotations

import codecs
import json
from typing import Any, AsyncIterable, Iterable, Union

from fastapi.concurrency import run_in_threadpool

from documents.loaders import parse_document, read_source
from documents.types import Diagnostic, DiagnosticSink
from engine.difference import SourceLoader, run_difference
from engine.errors import MalformedJsonError
from engine.types import DifferenceOptions, DifferenceResult

Chunk = Union[str, bytes, bytearray]


def serialize(geojson: Any) -> str:
    return json.dumps(geojson, ensure_ascii=False, separators=(",", ":"))


class GeojsonPassthrough:
    """
    Buffers an arbitrarily chunked GeoJSON text until end of stream, then
    parses it once, runs `operate` and serializes the result once.

    This base class passes the document through unchanged; subclasses
    override `operate`.
    """

    def __init__(self, *, source: str = "stdin", warn: DiagnosticSink | None = None):
        self.source = source
        self.warn = warn
        self.diagnostics: list[Diagnostic] = []
        self._parts: list[str] = []
        # Keeps a multi-byte UTF-8 sequence split across two chunks intact.
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._finished = False

    def feed(self, chunk: Chunk) -> None:
        if self._finished:
            raise RuntimeError("feed() after finish()")
        if isinstance(chunk, (bytes, bytearray)):
            chunk = self._decode(bytes(chunk))
        if chunk:
            self._parts.append(chunk)

    def finish(self) -> str:
        if self._finished:
            raise RuntimeError("finish() called twice")
        tail = self._decode(b"", final=True)
        self._finished = True
        text = "".join(self._parts) + tail
        self._parts = []

        geojson = self.parse(text, self.source)
        geojson = self.operate(geojson)
        return serialize(geojson)

    def parse(self, text: str, source: str) -> Any:
        return parse_document(text, source, warn=self._record)

    def operate(self, geojson: Any) -> Any:
        return geojson

    def _record(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if self.warn is not None:
            self.warn(diagnostic)

    def _decode(self, data: bytes, final: bool = False) -> str:
        try:
            return self._decoder.decode(data, final=final)
        except UnicodeDecodeError as e:
            raise MalformedJsonError(self.source, str(e)) from e


class DifferenceAssembler(GeojsonPassthrough):
    """
    Subtracts the configured sources from the streamed document.
    """

    def __init__(
        self,
        options: DifferenceOptions | None = None,
        *,
        source: str = "stdin",
        loader: SourceLoader = read_source,
    ):
        self.options = options or DifferenceOptions()
        super().__init__(source=source, warn=self.options.sink())
        self.loader = loader
        self.result: DifferenceResult | None = None

    def operate(self, geojson: Any) -> Any:
        self.result = run_difference(geojson, self.options, loader=self.loader)
        self.diagnostics.extend(self.result.diagnostics)
        return self.result.geojson


def assemble(chunks: Iterable[Chunk], assembler: GeojsonPassthrough) -> str:
    for chunk in chunks:
        assembler.feed(chunk)
    return assembler.finish()


async def assemble_async(chunks: AsyncIterable[Chunk], assembler: GeojsonPassthrough) -> str:
    async for chunk in chunks:
        assembler.feed(chunk)
    # Parsing, source reads and overlays run off the event loop.
    return await run_in_threadpool(assembler.finish)
