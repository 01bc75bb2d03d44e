import json
import pyfiber.uint
import typing

# Layout of the commitment lock args, 2 hex chars per byte:
#
#   pubkey_hash(20) | delay_epoch(8, little endian) | version(8) | tail
#
# The tail of a v1 lock holds the pending htlcs, a v2 lock holds settlement_hash(20) and an optional settlement
# flag(1). Fields are cut out by offset without bounds checks, short args give short or empty fields.
version_offset = 56
version_length = 16
# pubkey_hash + delay_epoch + version
min_hex_length = 72


def strip(data: str) -> str:
    return data[2:] if data.startswith('0x') else data


def uint(data: str) -> int:
    # A missing field reads as zero.
    return pyfiber.uint.decode(data) if data else 0


class LockArgs:
    def __init__(
        self,
        pubkey_hash: str,
        delay_epoch: pyfiber.uint.Epoch,
        version: int,
        htlcs: typing.Optional[str],
        settlement_hash: typing.Optional[str],
        settlement_flag: typing.Optional[int],
    ) -> None:
        self.pubkey_hash = pubkey_hash
        self.delay_epoch = delay_epoch
        self.version = version
        self.htlcs = htlcs
        self.settlement_hash = settlement_hash
        self.settlement_flag = settlement_flag

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, LockArgs)
        return all([
            self.pubkey_hash == other.pubkey_hash,
            self.delay_epoch == other.delay_epoch,
            self.version == other.version,
            self.htlcs == other.htlcs,
            self.settlement_hash == other.settlement_hash,
            self.settlement_flag == other.settlement_flag,
        ])

    def json(self) -> typing.Dict:
        r = {
            'pubkey_hash': self.pubkey_hash,
            'delay_epoch': self.delay_epoch.json(),
            'version': str(self.version),
        }
        if self.htlcs is not None:
            r['htlcs'] = self.htlcs
        if self.settlement_hash is not None:
            r['settlement_hash'] = self.settlement_hash
        if self.settlement_flag is not None:
            r['settlement_flag'] = self.settlement_flag
        return r


def decode_v1(data: str) -> LockArgs:
    data = strip(data)
    pubkey_hash = data[0:40]
    delay_epoch = uint(data[40:56])
    version = uint(data[56:72])
    htlcs = data[72:]
    return LockArgs(
        f'0x{pubkey_hash}',
        pyfiber.uint.epoch_decode(delay_epoch),
        version,
        f'0x{htlcs}' if htlcs else '',
        None,
        None,
    )


def decode_v2(data: str) -> LockArgs:
    data = strip(data)
    pubkey_hash = data[0:40]
    delay_epoch = uint(data[40:56])
    version = uint(data[56:72])
    settlement_hash = data[72:112]
    settlement_flag = data[112:114]
    return LockArgs(
        f'0x{pubkey_hash}',
        pyfiber.uint.epoch_decode(delay_epoch),
        version,
        None,
        f'0x{settlement_hash}' if settlement_hash else '',
        int(settlement_flag, 16) if settlement_flag else None,
    )


def version(data: str) -> typing.Optional[int]:
    # Read the version field as a little-endian integer. Args too short to carry it give None, the caller decides what
    # that means.
    data = strip(data)
    if len(data) < min_hex_length:
        return None
    return pyfiber.uint.decode(data[version_offset:version_offset + version_length])


def decode(data: str) -> LockArgs:
    if version(data) == 1:
        return decode_v1(data)
    return decode_v2(data)
