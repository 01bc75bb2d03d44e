import datetime
import json
import pyfiber.uint
import typing
from loguru import logger

# Witness of an input locked by the commitment lock. Both versions start with 16 bytes of empty witness args followed
# by a one byte discriminator:
#
#   v1: unlock_type   0xff revocation, 0xfe non-pending htlc, anything else pending htlc
#   v2: unlock_count  0x00 revocation, anything else settlement
#
# Decoding walks the hex string with fixed offsets, a truncated or non-hex witness raises ValueError.

# Each HTLC is htlc_type(1) | payment_amount(16) | payment_hash(20) | remote_htlc_pubkey_hash(20) |
# local_htlc_pubkey_hash(20) | htlc_expiry(8).
htlc_expiry_mask = (1 << 56) - 1
signature_size = 65
preimage_size = 32


class Reader:
    def __init__(self, data: str) -> None:
        self.data = data[2:] if data.startswith('0x') else data
        self.offset = 0

    def read(self, n: int) -> str:
        # Read n bytes, or whatever is left of them.
        r = self.data[self.offset:self.offset + n * 2]
        self.offset += n * 2
        return r

    def hex(self, n: int) -> str:
        return f'0x{self.read(n)}'

    def rest(self) -> str:
        r = self.data[self.offset:]
        self.offset = len(self.data)
        return f'0x{r}'

    def remain(self) -> bool:
        return len(self.data) > self.offset

    def u8(self) -> int:
        return int(self.read(1), 16)

    def uint(self, n: int) -> int:
        return pyfiber.uint.decode(self.read(n))


def timestamp_format(ms: int) -> str:
    # Rendered in local time.
    try:
        return datetime.datetime.fromtimestamp(ms / 1000).strftime('%Y-%m-%d %H:%M:%S')
    except (OverflowError, OSError, ValueError):
        return 'Invalid Date'


class Htlc:
    def __init__(
        self,
        htlc_type: int,
        payment_amount: int,
        payment_hash: str,
        remote_htlc_pubkey_hash: str,
        local_htlc_pubkey_hash: str,
        htlc_expiry_timestamp: int,
    ) -> None:
        self.htlc_type = htlc_type
        self.payment_amount = payment_amount
        self.payment_hash = payment_hash
        self.remote_htlc_pubkey_hash = remote_htlc_pubkey_hash
        self.local_htlc_pubkey_hash = local_htlc_pubkey_hash
        # Milliseconds.
        self.htlc_expiry_timestamp = htlc_expiry_timestamp

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, Htlc)
        return all([
            self.htlc_type == other.htlc_type,
            self.payment_amount == other.payment_amount,
            self.payment_hash == other.payment_hash,
            self.remote_htlc_pubkey_hash == other.remote_htlc_pubkey_hash,
            self.local_htlc_pubkey_hash == other.local_htlc_pubkey_hash,
            self.htlc_expiry_timestamp == other.htlc_expiry_timestamp,
        ])

    @property
    def htlc_expiry(self) -> str:
        return timestamp_format(self.htlc_expiry_timestamp)

    def json(self) -> typing.Dict:
        return {
            'htlc_type': self.htlc_type,
            'payment_amount': str(self.payment_amount),
            'payment_hash': self.payment_hash,
            'remote_htlc_pubkey_hash': self.remote_htlc_pubkey_hash,
            'local_htlc_pubkey_hash': self.local_htlc_pubkey_hash,
            'htlc_expiry': self.htlc_expiry,
            'htlc_expiry_timestamp': str(self.htlc_expiry_timestamp),
        }

    @classmethod
    def read(cls, r: Reader) -> typing.Self:
        htlc_type = r.u8()
        payment_amount = r.uint(16)
        payment_hash = r.hex(20)
        remote_htlc_pubkey_hash = r.hex(20)
        local_htlc_pubkey_hash = r.hex(20)
        htlc_expiry = r.uint(8) & htlc_expiry_mask
        return Htlc(
            htlc_type,
            payment_amount,
            payment_hash,
            remote_htlc_pubkey_hash,
            local_htlc_pubkey_hash,
            htlc_expiry * 1000,
        )


class Revocation:
    def __init__(self, version: int, pubkey: str, signature: str) -> None:
        self.version = version
        self.pubkey = pubkey
        self.signature = signature

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, Revocation)
        return all([
            self.version == other.version,
            self.pubkey == other.pubkey,
            self.signature == other.signature,
        ])

    def json(self) -> typing.Dict:
        return {
            'version': str(self.version),
            'pubkey': self.pubkey,
            'signature': self.signature,
        }

    @classmethod
    def read(cls, r: Reader) -> typing.Self:
        version = r.uint(8)
        pubkey = r.hex(32)
        return Revocation(version, pubkey, r.rest())


class NonPendingHtlc:
    def __init__(self, pubkey: str, signature: str) -> None:
        self.pubkey = pubkey
        self.signature = signature

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, NonPendingHtlc)
        return all([
            self.pubkey == other.pubkey,
            self.signature == other.signature,
        ])

    def json(self) -> typing.Dict:
        return {
            'pubkey': self.pubkey,
            'signature': self.signature,
        }

    @classmethod
    def read(cls, r: Reader) -> typing.Self:
        pubkey = r.hex(32)
        return NonPendingHtlc(pubkey, r.rest())


class PendingHtlc:
    def __init__(self, pending_htlc_count: int, htlcs: typing.List[Htlc], signature: str, preimage: str) -> None:
        self.pending_htlc_count = pending_htlc_count
        self.htlcs = htlcs
        self.signature = signature
        self.preimage = preimage

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, PendingHtlc)
        return all([
            self.pending_htlc_count == other.pending_htlc_count,
            self.htlcs == other.htlcs,
            self.signature == other.signature,
            self.preimage == other.preimage,
        ])

    def json(self) -> typing.Dict:
        return {
            'pending_htlc_count': self.pending_htlc_count,
            'htlcs': [e.json() for e in self.htlcs],
            'signature': self.signature,
            'preimage': self.preimage,
        }

    @classmethod
    def read(cls, r: Reader) -> typing.Self:
        pending_htlc_count = r.u8()
        htlcs = [Htlc.read(r) for _ in range(pending_htlc_count)]
        signature = r.hex(signature_size)
        preimage = r.hex(preimage_size) if r.remain() else 'N/A'
        return PendingHtlc(pending_htlc_count, htlcs, signature, preimage)


class Unlock:
    def __init__(self, unlock_type: int, with_preimage: int, signature: str, preimage: str) -> None:
        self.unlock_type = unlock_type
        self.with_preimage = with_preimage
        self.signature = signature
        self.preimage = preimage

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, Unlock)
        return all([
            self.unlock_type == other.unlock_type,
            self.with_preimage == other.with_preimage,
            self.signature == other.signature,
            self.preimage == other.preimage,
        ])

    def json(self) -> typing.Dict:
        return {
            'unlock_type': self.unlock_type,
            'with_preimage': self.with_preimage,
            'signature': self.signature,
            'preimage': self.preimage,
        }

    @classmethod
    def read(cls, r: Reader) -> typing.Self:
        unlock_type = r.u8()
        with_preimage = r.u8()
        signature = r.hex(signature_size)
        preimage = r.hex(preimage_size) if with_preimage == 0x01 else 'N/A'
        return Unlock(unlock_type, with_preimage, signature, preimage)


class Settlement:
    def __init__(
        self,
        pending_htlc_count: int,
        htlcs: typing.List[Htlc],
        settlement_remote_pubkey_hash: str,
        settlement_remote_amount: int,
        settlement_local_pubkey_hash: str,
        settlement_local_amount: int,
        unlocks: typing.List[Unlock],
    ) -> None:
        self.pending_htlc_count = pending_htlc_count
        self.htlcs = htlcs
        self.settlement_remote_pubkey_hash = settlement_remote_pubkey_hash
        self.settlement_remote_amount = settlement_remote_amount
        self.settlement_local_pubkey_hash = settlement_local_pubkey_hash
        self.settlement_local_amount = settlement_local_amount
        self.unlocks = unlocks

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, Settlement)
        return all([
            self.pending_htlc_count == other.pending_htlc_count,
            self.htlcs == other.htlcs,
            self.settlement_remote_pubkey_hash == other.settlement_remote_pubkey_hash,
            self.settlement_remote_amount == other.settlement_remote_amount,
            self.settlement_local_pubkey_hash == other.settlement_local_pubkey_hash,
            self.settlement_local_amount == other.settlement_local_amount,
            self.unlocks == other.unlocks,
        ])

    def json(self) -> typing.Dict:
        return {
            'pending_htlc_count': self.pending_htlc_count,
            'htlcs': [e.json() for e in self.htlcs],
            'settlement_remote_pubkey_hash': self.settlement_remote_pubkey_hash,
            'settlement_remote_amount': str(self.settlement_remote_amount),
            'settlement_local_pubkey_hash': self.settlement_local_pubkey_hash,
            'settlement_local_amount': str(self.settlement_local_amount),
            'unlocks': [e.json() for e in self.unlocks],
        }

    @classmethod
    def read(cls, r: Reader, unlock_count: int) -> typing.Self:
        pending_htlc_count = r.u8()
        htlcs = [Htlc.read(r) for _ in range(pending_htlc_count)]
        settlement_remote_pubkey_hash = r.hex(20)
        settlement_remote_amount = r.uint(16)
        settlement_local_pubkey_hash = r.hex(20)
        settlement_local_amount = r.uint(16)
        unlocks = [Unlock.read(r) for _ in range(unlock_count)]
        return Settlement(
            pending_htlc_count,
            htlcs,
            settlement_remote_pubkey_hash,
            settlement_remote_amount,
            settlement_local_pubkey_hash,
            settlement_local_amount,
            unlocks,
        )


class Witness:
    # Exactly one of revocation, non_pending_htlc, pending_htlc, settlement and error is set.

    def __init__(
        self,
        empty_witness_args: str,
        unlock_type: typing.Optional[int] = None,
        unlock_count: typing.Optional[int] = None,
        revocation: typing.Optional[Revocation] = None,
        non_pending_htlc: typing.Optional[NonPendingHtlc] = None,
        pending_htlc: typing.Optional[PendingHtlc] = None,
        settlement: typing.Optional[Settlement] = None,
        error: typing.Optional[str] = None,
    ) -> None:
        self.empty_witness_args = empty_witness_args
        self.unlock_type = unlock_type
        self.unlock_count = unlock_count
        self.revocation = revocation
        self.non_pending_htlc = non_pending_htlc
        self.pending_htlc = pending_htlc
        self.settlement = settlement
        self.error = error

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, Witness)
        return self.json() == other.json()

    @property
    def kind(self) -> str:
        for e in ['revocation', 'non_pending_htlc', 'pending_htlc', 'settlement', 'error']:
            if getattr(self, e) is not None:
                return e
        raise ValueError('empty witness')

    def json(self) -> typing.Dict:
        r: typing.Dict[str, typing.Any] = {'empty_witness_args': self.empty_witness_args}
        if self.unlock_type is not None:
            r['unlock_type'] = self.unlock_type
        if self.unlock_count is not None:
            r['unlock_count'] = self.unlock_count
        for e in ['revocation', 'non_pending_htlc', 'pending_htlc', 'settlement']:
            if getattr(self, e) is not None:
                r[e] = getattr(self, e).json()
        if self.error is not None:
            r['error'] = self.error
        return r

    @classmethod
    def error_decode(cls, message: str) -> typing.Self:
        return Witness('', error=message)


def decode_v1(data: str) -> Witness:
    r = Reader(data)
    empty_witness_args = r.hex(16)
    unlock_type = r.u8()
    w = Witness(empty_witness_args, unlock_type=unlock_type)
    if unlock_type == 0xff:
        w.revocation = Revocation.read(r)
    elif unlock_type == 0xfe:
        w.non_pending_htlc = NonPendingHtlc.read(r)
    else:
        w.pending_htlc = PendingHtlc.read(r)
    return w


def decode_v2(data: str) -> Witness:
    r = Reader(data)
    empty_witness_args = r.hex(16)
    unlock_count = r.u8()
    w = Witness(empty_witness_args, unlock_count=unlock_count)
    if unlock_count == 0x00:
        w.revocation = Revocation.read(r)
    else:
        w.settlement = Settlement.read(r, unlock_count)
    return w


def decode(data: str, version: int) -> Witness:
    # Never raises: a witness that fails to decode comes back as the error variant.
    try:
        if version == 1:
            return decode_v1(data)
        return decode_v2(data)
    except Exception as e:
        logger.warning(f'Witness decode failed: {e!r}')
        return Witness.error_decode(str(e))
