import struct

import pytest

from gafkit.byte_reader import (
    ByteSpan,
    Endianness,
    FieldType,
    read_integer,
    read_name,
    read_pointer_table,
    read_struct,
    size_of,
)
from gafkit.errors import OutOfBounds

MIXED_LAYOUT = (
    ('a', FieldType.U8),
    ('b', FieldType.I8),
    ('c', FieldType.U16),
    ('d', FieldType.I16),
    ('e', FieldType.U32),
    ('f', FieldType.I32),
    ('g', ByteSpan(5)),
)


def test_size_of_sums_field_widths():
    assert size_of(MIXED_LAYOUT) == 1 + 1 + 2 + 2 + 4 + 4 + 5
    assert size_of(()) == 0


def test_read_struct_reads_fields_in_order_from_offset():
    payload = struct.pack('<BbHhIi5s', 200, -2, 0xBEEF, -300, 0xDEADBEEF, -70000, b'hello')
    buffer = b'\xff' * 3 + payload

    result = read_struct(buffer, 3, MIXED_LAYOUT)

    assert list(result) == ['a', 'b', 'c', 'd', 'e', 'f', 'g']
    assert result['a'] == 200
    assert result['b'] == -2
    assert result['c'] == 0xBEEF
    assert result['d'] == -300
    assert result['e'] == 0xDEADBEEF
    assert result['f'] == -70000
    assert bytes(result['g']) == b'hello'


def test_read_struct_successive_offsets():
    layout = (('x', FieldType.U16), ('y', FieldType.U32), ('z', FieldType.U8))
    buffer = bytes(range(16))

    result = read_struct(buffer, 2, layout)

    assert result['x'] == struct.unpack_from('<H', buffer, 2)[0]
    assert result['y'] == struct.unpack_from('<I', buffer, 4)[0]
    assert result['z'] == buffer[8]


def test_read_struct_big_endian():
    layout = (('x', FieldType.U16), ('y', FieldType.U32))
    buffer = struct.pack('>HI', 0x1234, 0x89ABCDEF)

    result = read_struct(buffer, 0, layout, Endianness.BIG)

    assert result == {'x': 0x1234, 'y': 0x89ABCDEF}


def test_byte_span_is_a_read_only_view():
    source = bytearray(b'abcd')
    span = read_struct(source, 0, (('raw', ByteSpan(4)),))['raw']

    assert isinstance(span, memoryview)
    assert span.readonly
    source[0] = ord('z')
    assert bytes(span) == b'zbcd'


def test_read_struct_checks_bounds_per_field():
    buffer = bytes(6)
    layout = (('first', FieldType.U32), ('second', FieldType.U32))

    with pytest.raises(OutOfBounds) as exc_info:
        read_struct(buffer, 0, layout, record='test')

    assert exc_info.value.offset == 4
    assert exc_info.value.size == 4
    assert exc_info.value.buffer_length == 6
    assert exc_info.value.record == 'test'


def test_read_struct_rejects_negative_offset():
    with pytest.raises(OutOfBounds):
        read_struct(bytes(8), -1, (('x', FieldType.U8),))


def test_read_integer():
    buffer = struct.pack('<hI', -5, 77)
    assert read_integer(buffer, 0, FieldType.I16) == -5
    assert read_integer(buffer, 2, FieldType.U32) == 77
    with pytest.raises(OutOfBounds):
        read_integer(buffer, 4, FieldType.U32)


def test_read_pointer_table():
    buffer = b'\x00\x00' + struct.pack('<3I', 10, 20, 30)
    assert read_pointer_table(buffer, 2, 3) == [10, 20, 30]
    assert read_pointer_table(buffer, 2, 0) == []
    with pytest.raises(OutOfBounds):
        read_pointer_table(buffer, 2, 4)


def test_read_name_stops_at_nul():
    field = b'unit' + bytes(28)
    assert read_name(field) == 'unit'


def test_read_name_without_terminator_uses_full_capacity():
    field = b'A' * 32
    assert read_name(field + b'tail', 0, 32) == 'A' * 32


def test_read_name_empty():
    assert read_name(bytes(32)) == ''


def test_read_name_at_offset():
    buffer = b'xx' + b'arm\x00junk' + bytes(30)
    assert read_name(buffer, 2, 32) == 'arm'


def test_read_name_past_buffer_end():
    with pytest.raises(OutOfBounds):
        read_name(b'abc', 0, 32)
    with pytest.raises(OutOfBounds):
        read_name(b'abc', 10, 32)
