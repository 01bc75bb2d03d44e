import concurrent.futures
import json
import pyfiber.core
import pyfiber.error
import pyfiber.lockargs
import pyfiber.rpc
import pyfiber.witness
import typing
from loguru import logger


def udt_decode(data: bytearray) -> int:
    # The first 16 bytes of cell data hold the token amount as a little-endian u128.
    return int.from_bytes(data[:16], 'little')


class CellInfo:
    def __init__(
        self,
        args: bytearray,
        capacity: int,
        lock: typing.Optional[pyfiber.core.Script],
        udt_args: typing.Optional[bytearray],
        udt_capacity: typing.Optional[int],
    ) -> None:
        self.args = args
        self.capacity = capacity
        self.lock = lock
        self.udt_args = udt_args
        self.udt_capacity = udt_capacity

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, CellInfo)
        return all([
            self.args == other.args,
            self.capacity == other.capacity,
            self.lock == other.lock,
            self.udt_args == other.udt_args,
            self.udt_capacity == other.udt_capacity,
        ])

    @classmethod
    def cell_decode(cls, output: pyfiber.core.CellOutput, data: bytearray, with_lock: bool) -> typing.Self:
        return CellInfo(
            output.lock.args,
            output.capacity,
            output.lock if with_lock else None,
            output.type.args if output.type else None,
            udt_decode(data) if output.type else None,
        )

    def json(self) -> typing.Dict:
        r = {
            'args': f'0x{self.args.hex()}',
            'capacity': str(self.capacity),
        }
        if self.lock:
            r['lock'] = self.lock.json()
        if self.udt_args is not None:
            r['udt_args'] = f'0x{self.udt_args.hex()}'
        if self.udt_capacity is not None:
            r['udt_capacity'] = str(self.udt_capacity)
        return r


class BalanceChange:
    def __init__(self, ckb: int, udt: int) -> None:
        self.ckb = ckb
        self.udt = udt

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, BalanceChange)
        return all([
            self.ckb == other.ckb,
            self.udt == other.udt,
        ])

    def json(self) -> typing.Dict:
        return {
            'ckb': str(self.ckb),
            'udt': str(self.udt),
        }


class TxMessage:
    def __init__(
        self,
        input_cells: typing.List[CellInfo],
        output_cells: typing.List[CellInfo],
        fee: int,
        udt_fee: int,
        parsed_witness: typing.Optional[pyfiber.witness.Witness],
        balance_changes: typing.Dict[str, BalanceChange],
        block_number: str,
        block_timestamp: str,
    ) -> None:
        self.input_cells = input_cells
        self.output_cells = output_cells
        # Fees may be negative, it is up to the reader to call that a burn or an overpay.
        self.fee = fee
        self.udt_fee = udt_fee
        self.parsed_witness = parsed_witness
        # Keyed by the 0x prefixed lock args of the cells.
        self.balance_changes = balance_changes
        self.block_number = block_number
        self.block_timestamp = block_timestamp

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return {
            'input_cells': [e.json() for e in self.input_cells],
            'output_cells': [e.json() for e in self.output_cells],
            'fee': str(self.fee),
            'udt_fee': str(self.udt_fee),
            'parsed_witness': self.parsed_witness.json() if self.parsed_witness else None,
            'balance_changes': {k: v.json() for k, v in self.balance_changes.items()},
            'block_number': self.block_number,
            'block_timestamp': self.block_timestamp,
        }


def get_transaction(client: pyfiber.rpc.Client, tx_hash: bytearray) -> pyfiber.core.TransactionWithStatus:
    r = client.get_transaction(tx_hash)
    if r is None:
        raise pyfiber.error.NotFound(f'transaction not found: 0x{tx_hash.hex()}')
    return r


def get_previous_output(
    client: pyfiber.rpc.Client,
    out_point: pyfiber.core.OutPoint,
) -> typing.Tuple[pyfiber.core.CellOutput, bytearray]:
    prev = get_transaction(client, out_point.tx_hash).transaction
    return prev.outputs[out_point.index], prev.outputs_data[out_point.index]


def parse_witness(
    tx: pyfiber.core.Transaction,
    index: int,
    args: bytearray,
) -> typing.Optional[pyfiber.witness.Witness]:
    # Lock args too short to carry a version leave the witness undecoded.
    version = pyfiber.lockargs.version(args.hex())
    if version is None:
        return None
    try:
        witness = f'0x{tx.witnesses[index].hex()}'
    except IndexError as e:
        logger.warning(f'Witness {index} missing: {e!r}')
        return pyfiber.witness.Witness.error_decode(str(e))
    return pyfiber.witness.decode(witness, version)


def balance_changes(
    inputs: typing.List[CellInfo],
    outputs: typing.List[CellInfo],
) -> typing.Dict[str, BalanceChange]:
    # Inputs debit and outputs credit the lock args that guard them. Addresses that break even are left out.
    books: typing.Dict[str, BalanceChange] = {}
    for sign, cells in [(-1, inputs), (+1, outputs)]:
        for e in cells:
            k = f'0x{e.args.hex()}'
            b = books.setdefault(k, BalanceChange(0, 0))
            b.ckb += sign * e.capacity
            b.udt += sign * (e.udt_capacity or 0)
    return {k: v for k, v in books.items() if v.ckb != 0 or v.udt != 0}


def block_metadata(client: pyfiber.rpc.Client, tx_status: pyfiber.core.TxStatus) -> typing.Tuple[str, str]:
    # Best effort. Anything going wrong here leaves the transaction pending with no timestamp.
    if not tx_status.block_hash:
        return 'Pending', ''
    try:
        header = client.get_header(tx_status.block_hash)
    except Exception as e:
        logger.debug(f'Header 0x{tx_status.block_hash.hex()} unavailable: {e!r}')
        return 'Pending', ''
    if header is None:
        return 'Pending', ''
    return str(header.number), pyfiber.witness.timestamp_format(header.timestamp)


def build(
    client: pyfiber.rpc.Client,
    commitment_code_hash: bytearray,
    tx_hash: bytearray,
    workers: int = 8,
) -> TxMessage:
    # Resolve every input, compute the fee and per address balance deltas, and decode the witness of the first input
    # locked by the commitment lock. Raises NotFound when the transaction or one of its previous transactions is
    # missing. Previous outputs are fetched concurrently by up to workers threads.
    r = get_transaction(client, tx_hash)
    tx = r.transaction

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        prevs = list(executor.map(lambda e: get_previous_output(client, e.previous_output), tx.inputs))

    input_cells = [CellInfo.cell_decode(e[0], e[1], True) for e in prevs]
    parsed_witness = None
    for i, e in enumerate(input_cells):
        if e.lock.code_hash == commitment_code_hash:
            parsed_witness = parse_witness(tx, i, e.args)
            break

    output_cells = [CellInfo.cell_decode(e, d, False) for e, d in zip(tx.outputs, tx.outputs_data)]

    fee = sum([e.capacity for e in input_cells]) - sum([e.capacity for e in output_cells])
    udt_fee = sum([e.udt_capacity or 0 for e in input_cells]) - sum([e.udt_capacity or 0 for e in output_cells])
    block_number, block_timestamp = block_metadata(client, r.tx_status)

    return TxMessage(
        input_cells,
        output_cells,
        fee,
        udt_fee,
        parsed_witness,
        balance_changes(input_cells, output_cells),
        block_number,
        block_timestamp,
    )


def fetch_and_parse(client: pyfiber.rpc.Client, tx_hash: bytearray) -> typing.Tuple[str, str, int]:
    # Return the lock args guarding the first input, the first witness and the witness format version of a
    # transaction that spends a commitment cell.
    tx = get_transaction(client, tx_hash).transaction
    witness = f'0x{tx.witnesses[0].hex()}'
    prev = get_transaction(client, tx.inputs[0].previous_output.tx_hash).transaction
    lock_args = f'0x{prev.outputs[0].lock.args.hex()}'
    version = 1 if pyfiber.lockargs.version(lock_args) == 1 else 2
    return lock_args, witness, version
