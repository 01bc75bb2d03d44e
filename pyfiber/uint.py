import json
import typing

# Little-endian hex integers and the packed epoch format.
# See: https://github.com/nervosnetwork/rfcs/blob/master/rfcs/0017-tx-valid-since/0017-tx-valid-since.md


def decode(data: str) -> int:
    # Treat the hex string as a little-endian byte sequence. Works for any width, u64 and u128 fields alike. An empty
    # string is not a number and raises ValueError.
    if data.startswith('0x'):
        data = data[2:]
    if len(data) % 2 != 0:
        data = '0' + data
    return int(bytearray.fromhex(data)[::-1].hex(), 16)


def encode(n: int, size: int) -> str:
    assert n >= 0
    return bytearray(n.to_bytes(size, 'little')).hex()


class Epoch:
    def __init__(self, number: int, index: int, length: int, value: int) -> None:
        self.number = number
        self.index = index
        self.length = length
        self.value = value

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, Epoch)
        return all([
            self.number == other.number,
            self.index == other.index,
            self.length == other.length,
            self.value == other.value,
        ])

    def json(self) -> typing.Dict:
        return {
            'number': str(self.number),
            'index': str(self.index),
            'length': str(self.length),
            'value': str(self.value),
        }


def epoch_encode(e: int, i: int, l: int) -> int:
    assert 0 <= e and e <= 0xffffff
    assert 0 <= i and i <= 0xffff
    assert 0 <= l and l <= 0xffff
    return l << 0x28 | i << 0x18 | e


def epoch_decode(v: int) -> Epoch:
    # Bits above 56 are not part of the epoch and are dropped from the sub fields, value is kept as is.
    e = v & 0xffffff
    i = v >> 0x18 & 0xffff
    l = v >> 0x28 & 0xffff
    return Epoch(e, i, l, v)
