"""Tests for incremental line decoding."""

from uetail.decoder import LineDecoder, decode_chunk

SAMPLE = ('[2024.01.01-12.00.00:000][  0]LogInit: Display: Engine is initialized\r\n'
          '\n'
          '   \r\n'
          'LogTemp: Größe überschritten\n'
          'LogCook: Display: Cooked packages 1 Packages Remain 2 Total 3\n'
          'trailing fragment').encode('utf-8')


def _decode_in_pieces(data, cuts):
    dec   = LineDecoder()
    lines = []
    prev  = 0
    for c in list(cuts) + [len(data)]:
        lines.extend(dec.feed(data[prev:c]))
        prev = c
    return lines, dec.carry


def test_single_chunk():
    lines, carry = decode_chunk(b'', SAMPLE)
    assert lines == [
        '[2024.01.01-12.00.00:000][  0]LogInit: Display: Engine is initialized',
        'LogTemp: Größe überschritten',
        'LogCook: Display: Cooked packages 1 Packages Remain 2 Total 3',
    ]
    assert carry == b'trailing fragment'


def test_any_split_point_gives_same_lines():
    whole = decode_chunk(b'', SAMPLE)
    for cut in range(len(SAMPLE) + 1):
        assert _decode_in_pieces(SAMPLE, [cut]) == whole


def test_byte_by_byte():
    whole = decode_chunk(b'', SAMPLE)
    assert _decode_in_pieces(SAMPLE, range(1, len(SAMPLE))) == whole


def test_chunk_ending_on_newline_clears_carry():
    lines, carry = decode_chunk(b'Log', b'Temp: hi\n')
    assert lines == ['LogTemp: hi']
    assert carry == b''


def test_blank_lines_are_dropped():
    lines, carry = decode_chunk(b'', b'\n\r\n \t \n')
    assert lines == []
    assert carry == b''


def test_invalid_bytes_are_replaced():
    lines, _ = decode_chunk(b'', b'bad \xff\xfe bytes\n')
    assert lines == ['bad �� bytes']


def test_reset_drops_fragment():
    dec = LineDecoder()
    assert dec.feed(b'half a li') == []
    dec.reset()
    assert dec.feed(b'ne\n') == ['ne']
