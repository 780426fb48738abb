"""Stateful HTML document writer used for tag cloud and word count pages.

``DocumentRenderer`` owns a text sink and moves through a fixed sequence of
states::

    UNOPENED -> HEADER_WRITTEN -> BODY_OPEN -> CLOSED

``open()`` writes the preamble and opens the body, the ``write_*`` helpers are
only valid while the body is open, and ``close()`` writes the closing tags and
releases the sink. Any other order raises ``InvalidStateError``.

Used as a context manager the renderer releases its sink exactly once on every
exit path. When the block raises, the document is left without closing tags
and a file created by ``DocumentRenderer.for_path`` is removed, so a failed
run never leaves a page that looks complete.
"""
from __future__ import annotations

import enum
import html
import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Sequence

from tagcloud_errors import InvalidStateError, PreconditionError

logger = logging.getLogger("tagcloud.render")

TAG_NAME = re.compile(r"[A-Za-z][A-Za-z0-9]*")
CLASS_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_ -]*")

DEFAULT_STYLE = """<style>
  :root { --bg:#ffffff; --border:#e6e6ea; --text:#111827; }
  body { margin:0; padding:12px 16px; background:var(--bg); color:var(--text); font-family: ui-sans-serif, system-ui, -apple-system, "Segoe UI", Roboto, Helvetica, Arial; }
  h2 { font-weight:700; letter-spacing:.2px; }
  hr { border:0; border-top:1px solid var(--border); }
  .cdiv { display:flex; justify-content:center; padding:10px; }
  .cbox { max-width:960px; line-height:1.5; text-align:center; }
  .cbox span { cursor:default; margin:0 4px; white-space:nowrap; }
  table { border-collapse:collapse; }
  td, th { border:1px solid var(--border); padding:4px 10px; text-align:left; }
</style>"""


class RendererState(enum.Enum):
    UNOPENED = "unopened"
    HEADER_WRITTEN = "header written"
    BODY_OPEN = "body open"
    CLOSED = "closed"


def format_link(text: str, url: str) -> str:
    return f'<a href="{html.escape(url)}">{html.escape(text)}</a>'


def _check_tag(tag: str) -> str:
    if not isinstance(tag, str) or not TAG_NAME.fullmatch(tag):
        raise PreconditionError(f"Invalid HTML tag name: {tag!r}")
    return tag


class DocumentRenderer:
    """HTML writer composed over a text sink.

    Args:
        sink: Writable text stream the document is written to.
        owns_sink: Close ``sink`` when the renderer is released. Pass
            ``False`` to keep an in-memory buffer readable afterwards.
        owned_path: File created for this renderer; removed on abort.
    """

    def __init__(
        self,
        sink: IO[str],
        *,
        owns_sink: bool = True,
        owned_path: Optional[Path] = None,
    ) -> None:
        if sink is None:
            raise PreconditionError("DocumentRenderer requires an output sink")
        self._sink = sink
        self._owns_sink = owns_sink
        self._owned_path = owned_path
        self._state = RendererState.UNOPENED
        self._sections: List[str] = []
        self._released = False

    @classmethod
    def for_path(cls, path: Path | str, *, encoding: str = "utf-8") -> "DocumentRenderer":
        target = Path(path)
        sink = target.open("w", encoding=encoding, newline="\n")
        logger.debug("Opened %s for writing", target)
        return cls(sink, owned_path=target)

    @property
    def state(self) -> RendererState:
        return self._state

    @property
    def released(self) -> bool:
        return self._released

    def __enter__(self) -> "DocumentRenderer":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None and self._state is RendererState.BODY_OPEN:
            self.close()
        elif self._state is not RendererState.CLOSED:
            self.abort()
        return False

    def _require(self, state: RendererState, action: str) -> None:
        if self._state is not state:
            raise InvalidStateError(
                f"Cannot {action}: renderer is {self._state.value}, expected {state.value}"
            )

    def _emit(self, line: str) -> None:
        self._sink.write(line)
        self._sink.write("\n")

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._owns_sink:
            self._sink.close()

    # Document lifecycle

    def open(self, title: str, *, stylesheet: Optional[str] = None) -> "DocumentRenderer":
        self._require(RendererState.UNOPENED, "open document")
        if title is None:
            raise PreconditionError("Document title is required")
        self._emit("<!DOCTYPE html>")
        self._emit('<html lang="en">')
        self._emit("<head>")
        self._emit('<meta charset="utf-8"/>')
        self._nested(title, "title")
        self._emit(DEFAULT_STYLE)
        if stylesheet:
            self._emit(f'<link href="{html.escape(stylesheet)}" rel="stylesheet" type="text/css"/>')
        self._emit("</head>")
        self._state = RendererState.HEADER_WRITTEN
        self._emit("<body>")
        self._state = RendererState.BODY_OPEN
        return self

    def close(self) -> None:
        self._require(RendererState.BODY_OPEN, "close document")
        try:
            while self._sections:
                self._emit(f"</{self._sections.pop()}>")
            self._emit("</body>")
            self._emit("</html>")
        except BaseException:
            self.abort()
            raise
        self._state = RendererState.CLOSED
        try:
            # Buffered files may only report a full disk when flushed here.
            self._release()
        except BaseException:
            self._discard()
            raise

    def abort(self) -> None:
        """Release the sink without finishing the document."""
        if self._released:
            return
        self._state = RendererState.CLOSED
        try:
            self._release()
        finally:
            self._discard()

    def _discard(self) -> None:
        if self._owned_path is not None:
            logger.warning("Removing incomplete output %s", self._owned_path)
            self._owned_path.unlink(missing_ok=True)

    # Body content

    def _nested(self, text: str, tag: str) -> None:
        _check_tag(tag)
        self._emit(f"<{tag}>{html.escape(str(text))}</{tag}>")

    def write_nested(self, text: str, tag: str) -> None:
        self._require(RendererState.BODY_OPEN, f"write <{tag}>")
        self._nested(text, tag)

    def write_rule(self) -> None:
        self._require(RendererState.BODY_OPEN, "write horizontal rule")
        self._emit("<hr/>")

    def write_link(self, text: str, url: str) -> None:
        self._require(RendererState.BODY_OPEN, "write link")
        self._emit(format_link(text, url))

    def write_word(self, word: str, size: int, count: int) -> None:
        self._require(RendererState.BODY_OPEN, "write word")
        if word is None:
            raise PreconditionError("Word is required")
        size = int(size)
        self._emit(
            f'<span class="f{size}" style="font-size:{size}px" title="count: {int(count)}">'
            f"{html.escape(word)}</span>"
        )

    def write_table(
        self,
        rows: Iterable[Sequence[object]],
        *,
        header: Optional[Sequence[str]] = None,
    ) -> None:
        self._require(RendererState.BODY_OPEN, "write table")
        self._emit('<table border="1">')
        if header:
            self._emit("<thead>")
            self._emit("<tr>" + "".join(f"<th>{html.escape(str(cell))}</th>" for cell in header) + "</tr>")
            self._emit("</thead>")
        self._emit("<tbody>")
        for row in rows:
            self._emit("<tr>" + "".join(f"<td>{html.escape(str(cell))}</td>" for cell in row) + "</tr>")
        self._emit("</tbody>")
        self._emit("</table>")

    def open_section(self, tag: str, css_class: Optional[str] = None) -> None:
        self._require(RendererState.BODY_OPEN, f"open <{tag}>")
        _check_tag(tag)
        if css_class is not None and not CLASS_NAME.fullmatch(css_class):
            raise PreconditionError(f"Invalid CSS class: {css_class!r}")
        attrs = f' class="{css_class}"' if css_class else ""
        self._emit(f"<{tag}{attrs}>")
        self._sections.append(tag)

    def close_section(self) -> None:
        self._require(RendererState.BODY_OPEN, "close section")
        if not self._sections:
            raise InvalidStateError("No open section to close")
        self._emit(f"</{self._sections.pop()}>")

    @contextmanager
    def section(self, tag: str, css_class: Optional[str] = None) -> Iterator["DocumentRenderer"]:
        self.open_section(tag, css_class)
        depth = len(self._sections)
        try:
            yield self
        finally:
            if self._state is RendererState.BODY_OPEN and len(self._sections) == depth:
                self.close_section()
