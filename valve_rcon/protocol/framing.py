from __future__ import annotations

import asyncio

from pydantic import ValidationError

from .constants import ENCODING, HEADER, MAX_FRAME_SIZE, MAX_PACKET_SIZE, MIN_FRAME_SIZE, SIZE_FIELD, TERMINATOR
from .errors import ConnectionClosed, FramingError, OversizeError
from .packets import Origin, Packet, resolve_type


def encode_packet(packet: Packet) -> bytes:
    """
    Encode a packet into its wire representation.

    Raises OversizeError when the result exceeds MAX_PACKET_SIZE; large output
    has to be sent as several packets by the caller.
    """
    body = packet.body.encode(ENCODING)
    size = HEADER.size - SIZE_FIELD.size + len(body) + len(TERMINATOR)
    data = HEADER.pack(size, packet.id, packet.type.code) + body + TERMINATOR
    if len(data) > MAX_PACKET_SIZE:
        raise OversizeError(len(data), MAX_PACKET_SIZE, data)
    return data


def _body_length(size: int) -> int:
    """Bytes left to read after id and type, terminators included."""
    return size - (HEADER.size - SIZE_FIELD.size)


def _build_packet(size: int, packet_id: int, code: int, payload: bytes, origin: Origin) -> Packet:
    # the trailing two bytes are terminators and are not checked
    try:
        body = payload[: len(payload) - len(TERMINATOR)].decode(ENCODING)
    except UnicodeDecodeError as exc:
        raise FramingError(f"could not decode packet body: {exc}") from exc
    try:
        return Packet(id=packet_id, type=resolve_type(code, origin), body=body, size=size)
    except ValidationError as exc:
        raise FramingError(f"invalid packet: {exc}") from exc


def _check_size(size: int) -> None:
    # the body is left unread, so the stream cannot be realigned
    if size > MAX_FRAME_SIZE:
        raise FramingError(f"declared packet size {size} exceeds the maximum of {MAX_FRAME_SIZE}", recoverable=False)
    if _body_length(size) < 0:
        raise FramingError(f"declared packet size {size} is smaller than the packet header", recoverable=False)


def decode_packet(data: bytes, origin: Origin = Origin.CLIENT) -> Packet:
    """Decode exactly one packet from a complete buffer."""
    if len(data) < HEADER.size:
        raise FramingError(f"could not read packet header, got {len(data)} bytes")
    size, packet_id, code = HEADER.unpack_from(data)
    _check_size(size)
    body_len = _body_length(size)
    payload = data[HEADER.size : HEADER.size + body_len]
    if len(payload) != body_len:
        raise FramingError(f"could not read packet body, expected {body_len} bytes, got {len(payload)}")
    if size < MIN_FRAME_SIZE:
        raise FramingError(f"packet body of {body_len} bytes is missing its terminators")
    return _build_packet(size, packet_id, code, payload, origin)


async def read_packet(reader: asyncio.StreamReader, origin: Origin = Origin.CLIENT) -> Packet:
    """
    Read a single frame from the stream and decode it.

    ConnectionClosed means the stream ended cleanly between frames; a stream
    ending inside a frame is a FramingError.
    """
    try:
        header = await reader.readexactly(HEADER.size)
    except asyncio.IncompleteReadError as exc:
        if not exc.partial:
            raise ConnectionClosed("connection closed") from exc
        raise FramingError(f"could not read packet header, got {len(exc.partial)} bytes") from exc
    size, packet_id, code = HEADER.unpack(header)
    _check_size(size)
    body_len = _body_length(size)
    try:
        payload = await reader.readexactly(body_len)
    except asyncio.IncompleteReadError as exc:
        raise FramingError(f"could not read packet body, expected {body_len} bytes, got {len(exc.partial)}") from exc
    if size < MIN_FRAME_SIZE:
        raise FramingError(f"packet body of {body_len} bytes is missing its terminators")
    return _build_packet(size, packet_id, code, payload, origin)


__all__ = ["encode_packet", "decode_packet", "read_packet"]
