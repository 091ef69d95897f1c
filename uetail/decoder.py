"""
Incremental byte-to-line decoding for tailed files.

Bytes arrive in chunks of any size; a chunk may end in the middle of a line
or in the middle of a multi-byte character. The carry holds the unterminated
tail as raw bytes so that feeding the same stream in one chunk or in many
yields exactly the same lines.
"""


def decode_chunk(carry: bytes, data: bytes) -> tuple[list, bytes]:
    # (carry, chunk) -> (complete non-blank lines, new carry)
    parts = (carry + data).split(b'\n')
    # the last segment is either b'' (chunk ended on \n) or an unterminated fragment
    new_carry = parts.pop()
    lines = []
    for raw in parts:
        if raw.endswith(b'\r'):
            raw = raw[:-1]
        line = raw.decode('utf-8', errors='replace')
        if not line.strip():
            continue
        lines.append(line)
    return lines, new_carry


class LineDecoder:
    # Stateful wrapper around decode_chunk for callers that own one stream.

    def __init__(self):
        self.carry = b''

    def feed(self, data: bytes) -> list:
        lines, self.carry = decode_chunk(self.carry, data)
        return lines

    def reset(self) -> None:
        self.carry = b''
