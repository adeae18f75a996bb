"""Minimal HTTP server exposing the readings and accepting new limits."""

from __future__ import annotations

import asyncio
import logging
import re
from contextlib import suppress
from dataclasses import asdict, fields, replace
from enum import Enum

from .alerts import Readings, Settings

logger = logging.getLogger(__name__)

MAX_REQUEST_LEN = 2048
_PAGE_LIMIT = 4096
_CHUNK_SIZE = 1460
_HEADER_END = b"\r\n\r\n"


def _response_head(status: str, content_type: str, *extra: str) -> bytes:
    lines = [f"HTTP/1.1 {status}", f"Content-Type: {content_type}", *extra, "Connection: close"]
    return ("\r\n".join(lines) + "\r\n\r\n").encode("ascii")


HEADER_HTML = _response_head("200 OK", "text/html")
HEADER_JSON = _response_head("200 OK", "application/json", "Access-Control-Allow-Origin: *")
LIMITS_UPDATED = _response_head("200 OK", "text/plain") + b"Limites atualizados."

# Form rows of the limits panel: (form key, settings field, caption).
# Each row ends with a line break on the page and is one template literal
# in the script that posts the form.
_LIMIT_ROWS = (
    (("tempMin", "temp_min", "Temp Min"), ("tempMax", "temp_max", "Temp Max")),
    (("umiMin", "umi_min", "Umi Min"), ("umiMax", "umi_max", "Umi Max")),
    (("presMin", "pres_min", "Pres Min"), ("presMax", "pres_max", "Pres Max")),
    (
        ("offSetTemp", "offset_temp", "Offset Temp"),
        ("offSetUmi", "offset_umi", "Offset Umi"),
        ("offSetPres", "offset_pres", "Offset Pres"),
    ),
)
_LIMIT_FIELDS = tuple(entry for row in _LIMIT_ROWS for entry in row)

# Live series: (json key, chart id, caption, unit, colour).
_SERIES = (
    ("temp", "chartTemp", "Temperatura", "°C", "red"),
    ("umi", "chartUmi", "Umidade", "%", "blue"),
    ("pres", "chartPres", "Pressão", "hPa", "green"),
)

_TITLE = "Estação Meteorológica"
_CHART_JS_SRC = "https://cdn.jsdelivr.net/npm/chart.js"
_HISTORY = 20
_REFRESH_MS = 2000

_STYLES = {
    "body": {
        "font-family": "sans-serif", "background": "#e0f7fa", "color": "#01579b",
        "margin": "0", "padding": "0",
    },
    "header": {
        "text-align": "center", "background": "#01579b", "color": "white",
        "padding": "15px", "font-size": "1.8rem",
    },
    ".sensor": {"text-align": "center", "margin": "15px 0"},
    ".sensor h2": {"margin": "10px 0", "font-size": "1.2rem"},
    ".limits": {"text-align": "center", "margin": "20px auto"},
    ".limits input": {"width": "80px", "padding": "5px", "margin": "5px"},
    ".limits label": {"margin": "5px", "display": "inline-block"},
    "button": {
        "padding": "10px 20px", "background": "#0077b6", "border": "none",
        "color": "white", "border-radius": "5px", "cursor": "pointer",
    },
    "button:hover": {"background": "#005f87"},
    ".graphs": {
        "display": "flex", "flex-wrap": "wrap", "justify-content": "center",
        "gap": "20px", "margin": "20px",
    },
    ".graph-half": {"flex": "1 1 300px", "max-width": "400px"},
    ".graph-full": {"width": "100%", "max-width": "600px", "margin": "auto"},
    "canvas": {
        "width": "100%", "height": "250px", "border": "1px solid #ccc",
        "border-radius": "10px",
    },
}


def _stylesheet() -> str:
    return "".join(
        selector + "{" + ";".join(f"{name}:{value}" for name, value in rules.items()) + "}"
        for selector, rules in _STYLES.items()
    )


def _post_script() -> str:
    literals = []
    for number, row in enumerate(_LIMIT_ROWS):
        pairs = "&".join(f"{key}=${{{key}.value}}" for key, _, _ in row)
        literals.append("`" + ("&" if number else "") + pairs + "`")
    return (
        "function enviarLimites(){const body=" + "+".join(literals) + ";"
        "fetch('/set-limits',{method:'POST',headers:"
        "{'Content-Type':'application/x-www-form-urlencoded'},body});}"
    )


def _refresh_script() -> str:
    texts = "".join(
        f"document.getElementById('{key}').textContent=data.{key}.toFixed(2);"
        for key, *_ in _SERIES
    )
    pushes = "".join(
        f"{chart}.data.labels.push(''); {chart}.data.datasets[0].data.push(data.{key});"
        for key, chart, *_ in _SERIES
    )
    first_chart = _SERIES[0][1]
    shifts = "".join(
        f"{chart}.data.labels.shift(); {chart}.data.datasets[0].data.shift();"
        for _, chart, *_ in _SERIES
    )
    updates = " ".join(f"{chart}.update();" for _, chart, *_ in _SERIES)
    return (
        "function atualizar(){fetch('/data').then(res=>res.json()).then(data=>{"
        + texts
        + pushes
        + f"if({first_chart}.data.labels.length>{_HISTORY}){{"
        + shifts
        + "}"
        + updates
        + "}).catch(console.error);}"
    )


def _chart_script() -> str:
    return "".join(
        f"const {chart}=new Chart(document.getElementById('{chart}'),"
        f"{{type:'line',data:{{labels:[],datasets:[{{label:'{caption} ({unit})',"
        f"data:[],borderColor:'{colour}'}}]}},"
        "options:{responsive:true,animation:false}});"
        for _, chart, caption, unit, colour in _SERIES
    )


def _page(settings: Settings) -> str:
    values = asdict(settings)
    parts = [
        "<!DOCTYPE html><html lang='pt-BR'><head><meta charset='UTF-8'/>",
        "<meta name='viewport' content='width=device-width, initial-scale=1.0'/>",
        f"<title>{_TITLE}</title>",
        "<style>", _stylesheet(), "</style></head><body>",
        f"<header>{_TITLE}</header>",
        "<div class='sensor'>",
    ]
    parts.extend(
        f"<h2>{caption}: <span id='{key}'>--</span>{unit}</h2>"
        for key, _, caption, unit, _ in _SERIES
    )
    parts.append("</div><div class='limits'>")
    for row in _LIMIT_ROWS:
        parts.extend(
            f"<label>{caption}: <input type='number' id='{key}' "
            f"value='{values[field]:.1f}'></label>"
            for key, field, caption in row
        )
        parts.append("<br>")
    parts.append("<button onclick='enviarLimites()'>Salvar</button></div>")
    parts.append("<div class='graphs'>")
    parts.extend(
        f"<div class='graph-half'><canvas id='{chart}'></canvas></div>"
        for _, chart, *_ in _SERIES
    )
    parts.append("</div>")
    parts.append(f"<script src='{_CHART_JS_SRC}'></script>")
    parts.append("<script>")
    parts.append(_post_script())
    parts.append(_refresh_script())
    parts.append(_chart_script())
    parts.append(f"setInterval(atualizar,{_REFRESH_MS}); atualizar();")
    parts.append("</script></body></html>")
    return "".join(parts)


_FLOAT = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_CONTENT_LENGTH = re.compile(rb"Content-Length:\s*([+-]?\d+)")


class _Route(Enum):
    INDEX = "index"
    DATA = "data"
    SET_LIMITS = "set-limits"


def _route(request: bytes) -> _Route | None:
    if request.startswith(b"GET / "):
        return _Route.INDEX
    if request.startswith(b"GET /data"):
        return _Route.DATA
    if b"POST /set-limits" in request:
        return _Route.SET_LIMITS
    return None


def _content_length(request: bytes) -> int:
    start = request.find(b"Content-Length:")
    if start < 0:
        return 0
    match = _CONTENT_LENGTH.match(request, start)
    return int(match.group(1)) if match else 0


class RequestTooLarge(Exception):
    """The request does not fit in the receive buffer."""


class RequestAssembler:
    """Accumulates received chunks until a whole request is present."""

    def __init__(self, limit: int = MAX_REQUEST_LEN) -> None:
        self.limit = limit
        self._buffer = bytearray()

    def feed(self, chunk: bytes) -> bytes | None:
        """Add ``chunk``; return the complete request, or None if more is needed.

        Raises RequestTooLarge, and discards what was buffered, when the
        request would reach the limit.
        """
        if len(self._buffer) + len(chunk) >= self.limit:
            self.reset()
            raise RequestTooLarge(f"request exceeds {self.limit} bytes")
        self._buffer += chunk
        end = self._buffer.find(_HEADER_END)
        if end < 0:
            return None
        if _route(bytes(self._buffer)) is _Route.SET_LIMITS:
            expected = end + len(_HEADER_END) + _content_length(bytes(self._buffer))
            if len(self._buffer) < expected:
                return None
        request = bytes(self._buffer)
        self.reset()
        return request

    def reset(self) -> None:
        """Discard anything buffered."""
        self._buffer.clear()


def render_index(settings: Settings) -> str:
    """Return the dashboard page with the current limits filled in."""
    encoded = _page(settings).encode("utf-8")[: _PAGE_LIMIT - 1]
    return encoded.decode("utf-8", errors="ignore")


def render_data(readings: Readings) -> str:
    """Return the readings as the JSON document served at /data."""
    return '{"temp":%.2f,"umi":%.2f,"pres":%.2f}' % (
        readings.temperature,
        readings.humidity,
        readings.pressure,
    )


def parse_limits(body: str, settings: Settings) -> Settings:
    """Return ``settings`` with the values found in a form-encoded body applied.

    Decimal commas are accepted; keys that are missing or whose value does
    not start with a number keep their current value.
    """
    updates: dict[str, float] = {}
    for token in body.replace(",", ".").split("&"):
        for key, field, _caption in _LIMIT_FIELDS:
            prefix = key + "="
            if token.startswith(prefix):
                match = _FLOAT.match(token, len(prefix))
                if match:
                    updates[field] = float(match.group(1))
    return replace(settings, **updates)


def _assign(target: Settings, source: Settings) -> None:
    for item in fields(Settings):
        setattr(target, item.name, getattr(source, item.name))


def handle_request(request: bytes | str, readings: Readings, settings: Settings) -> bytes:
    """Build the response for a complete request.

    A /set-limits request updates ``settings`` in place. Requests for any
    other path get an empty response.
    """
    if isinstance(request, str):
        request = request.encode("utf-8")
    end = request.find(_HEADER_END)
    if end < 0:
        raise ValueError("request headers are not terminated")
    route = _route(request)
    if route is _Route.INDEX:
        return HEADER_HTML + render_index(settings).encode("utf-8")
    if route is _Route.DATA:
        return HEADER_JSON + render_data(readings).encode("utf-8")
    if route is _Route.SET_LIMITS:
        body = request[end + len(_HEADER_END):].decode("latin-1")
        updated = parse_limits(body, settings)
        _assign(settings, updated)
        logger.info(
            "new limits: temp %.1f - %.1f, umi %.1f - %.1f, pres %.1f - %.1f, "
            "offsets %.2f %.2f %.2f",
            updated.temp_min, updated.temp_max,
            updated.umi_min, updated.umi_max,
            updated.pres_min, updated.pres_max,
            updated.offset_temp, updated.offset_umi, updated.offset_pres,
        )
        return LIMITS_UPDATED
    return b""


class WeatherServer:
    """Serves the dashboard, the live readings and the limits form."""

    def __init__(self, readings: Readings | None = None, settings: Settings | None = None) -> None:
        self.readings = readings if readings is not None else Readings()
        self.settings = settings if settings is not None else Settings()

    async def handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Answer one request on a connection, then close it."""
        assembler = RequestAssembler()
        try:
            while True:
                chunk = await reader.read(_CHUNK_SIZE)
                if not chunk:
                    return
                try:
                    request = assembler.feed(chunk)
                except RequestTooLarge:
                    logger.warning("request too large")
                    return
                if request is None:
                    continue
                response = handle_request(request, self.readings, self.settings)
                if response:
                    writer.write(response)
                    await writer.drain()
                return
        finally:
            writer.close()
            with suppress(ConnectionError):
                await writer.wait_closed()

    async def serve(self, host: str = "0.0.0.0", port: int = 80) -> asyncio.Server:
        """Start listening and return the running server."""
        return await asyncio.start_server(self.handle, host, port)