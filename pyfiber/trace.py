import itertools
import json
import pyfiber.rpc
import pyfiber.txmsg
import typing
from loguru import logger


class TraceItem:
    def __init__(self, tx_hash: bytearray, msg: pyfiber.txmsg.TxMessage) -> None:
        self.tx_hash = tx_hash
        self.msg = msg

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return {
            'tx_hash': f'0x{self.tx_hash.hex()}',
            'msg': self.msg.json(),
        }


def death(
    client: pyfiber.rpc.Client,
    tx_hash: bytearray,
) -> typing.Optional[typing.Tuple[bytearray, bytearray]]:
    # Find the transaction that consumes the first output of tx_hash. The indexer reports one entry when the cell is
    # created and another when it is spent, so exactly two entries means the second one is the spend. Any other count
    # ends the trail. Returns the spending transaction hash and the code hash of the lock of the spent cell.
    r = client.get_transaction(tx_hash)
    if r is None:
        return None
    lock = r.transaction.outputs[0].lock
    txs = client.get_transactions(pyfiber.rpc.search_key(lock)).objects
    if len(txs) != 2:
        return None
    return txs[1], lock.code_hash


def trace(
    client: pyfiber.rpc.Client,
    commitment_code_hash: bytearray,
    open_channel_tx_hash: bytearray,
    progress: typing.Optional[typing.Callable[[int], None]] = None,
) -> typing.List[TraceItem]:
    # Follow the channel cell from its funding transaction until it is spent into a cell that is no longer guarded by
    # the commitment lock or is not spent at all. progress, when given, is called with the length of the trace after
    # each step.
    result: typing.List[TraceItem] = []

    def push(tx_hash: bytearray) -> None:
        msg = pyfiber.txmsg.build(client, commitment_code_hash, tx_hash)
        result.append(TraceItem(tx_hash, msg))
        logger.info(f'Trace step {len(result)}: 0x{tx_hash.hex()}')
        if progress:
            progress(len(result))

    push(open_channel_tx_hash)
    r = death(client, open_channel_tx_hash)
    if r is None:
        return result
    push(r[0])
    curr = r[0]
    for _ in itertools.repeat(0):
        r = death(client, curr)
        if r is None:
            break
        push(r[0])
        if r[1] != commitment_code_hash:
            break
        curr = r[0]
    return result
