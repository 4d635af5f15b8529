from __future__ import annotations

import asyncio
import struct

import pytest
from pydantic import ValidationError

from valve_rcon.protocol import (
    MAX_PACKET_SIZE,
    ConnectionClosed,
    FramingError,
    Origin,
    OversizeError,
    Packet,
    PacketType,
    decode_packet,
    encode_packet,
    read_packet,
)

AUTH_PACKET = bytes.fromhex("11 00 00 00 00 00 00 00 03 00 00 00 70 61 73 73 77 72 64 00 00")


def _frame(size: int, packet_id: int, code: int, payload: bytes = b"") -> bytes:
    return struct.pack("<iii", size, packet_id, code) + payload


def _read(data: bytes, origin: Origin = Origin.CLIENT) -> Packet:
    async def run() -> Packet:
        reader = asyncio.StreamReader()
        reader.feed_data(data)
        reader.feed_eof()
        return await read_packet(reader, origin)

    return asyncio.run(run())


def test_decode_auth_packet():
    packet = decode_packet(AUTH_PACKET)
    assert packet.size == 17
    assert packet.id == 0
    assert packet.type is PacketType.AUTH
    assert packet.body == "passwrd"


def test_encode_auth_packet():
    assert encode_packet(Packet(id=0, type=PacketType.AUTH, body="passwrd")) == AUTH_PACKET


def test_encode_decode_roundtrip():
    packet = Packet(id=-123456, type=PacketType.EXEC_COMMAND, body="status\nplayers 'all'")
    decoded = decode_packet(encode_packet(packet))
    assert (decoded.id, decoded.type, decoded.body) == (packet.id, packet.type, packet.body)
    assert decoded.size == len(packet.body) + 10


def test_empty_body_roundtrip():
    data = encode_packet(Packet(id=7, type=PacketType.AUTH_RESPONSE))
    assert data == _frame(10, 7, 2, b"\x00\x00")
    decoded = decode_packet(data, Origin.SERVER)
    assert decoded.type is PacketType.AUTH_RESPONSE
    assert decoded.body == ""


def test_type_two_depends_on_origin():
    data = _frame(10, 5, 2, b"\x00\x00")
    assert decode_packet(data, Origin.CLIENT).type is PacketType.EXEC_COMMAND
    assert decode_packet(data, Origin.SERVER).type is PacketType.AUTH_RESPONSE
    assert PacketType.EXEC_COMMAND.code == PacketType.AUTH_RESPONSE.code == 2
    assert PacketType.EXEC_COMMAND is not PacketType.AUTH_RESPONSE


def test_largest_packet_fits():
    body = "x" * (MAX_PACKET_SIZE - 14)
    data = encode_packet(Packet(id=1, type=PacketType.RESPONSE_VALUE, body=body))
    assert len(data) == MAX_PACKET_SIZE
    assert decode_packet(data, Origin.SERVER).body == body


@pytest.mark.parametrize("length", [MAX_PACKET_SIZE - 13, 4087, 10000])
def test_oversize_packet_rejected(length):
    with pytest.raises(OversizeError) as excinfo:
        encode_packet(Packet(id=1, type=PacketType.RESPONSE_VALUE, body="x" * length))
    assert excinfo.value.limit == MAX_PACKET_SIZE
    assert excinfo.value.size == length + 14
    assert len(excinfo.value.data) == length + 14


def test_oversize_counts_encoded_bytes():
    # two bytes per character in UTF-8
    with pytest.raises(OversizeError):
        encode_packet(Packet(id=1, type=PacketType.RESPONSE_VALUE, body="é" * 2100))


def test_packet_id_must_fit_int32():
    with pytest.raises(ValidationError):
        Packet(id=2**31, type=PacketType.AUTH)


@pytest.mark.parametrize("size", [8, 9])
def test_body_without_terminators_rejected(size):
    data = _frame(size, 1, 3, b"\x00" * (size - 8))
    with pytest.raises(FramingError):
        decode_packet(data)


@pytest.mark.parametrize("size", [-1, 7, MAX_PACKET_SIZE])
def test_invalid_size_rejected(size):
    with pytest.raises(FramingError) as excinfo:
        decode_packet(_frame(size, 1, 3, b"\x00" * 16))
    assert not excinfo.value.recoverable


def test_truncated_buffer_rejected():
    with pytest.raises(FramingError):
        decode_packet(AUTH_PACKET[:-3])
    with pytest.raises(FramingError):
        decode_packet(AUTH_PACKET[:6])


def test_unknown_type_rejected():
    with pytest.raises(FramingError):
        decode_packet(_frame(10, 1, 9, b"\x00\x00"))
    with pytest.raises(FramingError):
        decode_packet(_frame(10, 1, 3, b"\x00\x00"), Origin.SERVER)


def test_invalid_utf8_body_rejected():
    with pytest.raises(FramingError):
        decode_packet(_frame(12, 1, 2, b"\xff\xfe\x00\x00"))


def test_terminator_bytes_not_validated():
    assert decode_packet(_frame(12, 1, 2, b"ok!!")).body == "ok"


def test_read_packet_from_stream():
    packet = _read(AUTH_PACKET)
    assert packet.id == 0
    assert packet.body == "passwrd"


def test_read_packet_clean_eof():
    with pytest.raises(ConnectionClosed):
        _read(b"")


def test_read_packet_partial_frame():
    with pytest.raises(FramingError):
        _read(AUTH_PACKET[:5])
    with pytest.raises(FramingError):
        _read(AUTH_PACKET[:15])


def test_read_packet_consumes_short_body():
    async def run():
        reader = asyncio.StreamReader()
        reader.feed_data(_frame(9, 1, 3, b"\x00") + AUTH_PACKET)
        reader.feed_eof()
        with pytest.raises(FramingError) as excinfo:
            await read_packet(reader)
        assert excinfo.value.recoverable
        return await read_packet(reader)

    assert asyncio.run(run()).body == "passwrd"
