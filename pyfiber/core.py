import json
import typing

# Result shapes of the CKB JSON-RPC methods read by the decoder. Only the fields the decoder needs are kept.
# Doc: https://github.com/nervosnetwork/ckb/tree/develop/rpc

# Specifies how the script code_hash is used to match the script code and how to run the code.
script_hash_type_data = 0
script_hash_type_type = 1
script_hash_type_data1 = 2
script_hash_type_data2 = 4


def hex_decode(data: str) -> bytearray:
    assert data.startswith('0x')
    return bytearray.fromhex(data[2:])


class Script:
    def __init__(self, code_hash: bytearray, hash_type: int, args: bytearray) -> None:
        assert len(code_hash) == 32
        assert hash_type in [
            script_hash_type_data,
            script_hash_type_type,
            script_hash_type_data1,
            script_hash_type_data2,
        ]
        self.code_hash = code_hash
        self.hash_type = hash_type
        self.args = args

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        # Byte comparison, so two scripts differing only in the case of their hex are equal.
        assert isinstance(other, Script)
        return all([
            self.code_hash == other.code_hash,
            self.hash_type == other.hash_type,
            self.args == other.args,
        ])

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'code_hash': f'0x{self.code_hash.hex()}',
            'hash_type': {
                script_hash_type_data: 'data',
                script_hash_type_type: 'type',
                script_hash_type_data1: 'data1',
                script_hash_type_data2: 'data2',
            }[self.hash_type],
            'args': f'0x{self.args.hex()}',
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        return Script(
            hex_decode(data['code_hash']),
            {
                'data': script_hash_type_data,
                'type': script_hash_type_type,
                'data1': script_hash_type_data1,
                'data2': script_hash_type_data2,
            }[data['hash_type']],
            hex_decode(data['args']),
        )


class OutPoint:
    def __init__(self, tx_hash: bytearray, index: int) -> None:
        assert len(tx_hash) == 32
        self.tx_hash = tx_hash
        self.index = index

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, OutPoint)
        return all([
            self.tx_hash == other.tx_hash,
            self.index == other.index,
        ])

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'tx_hash': f'0x{self.tx_hash.hex()}',
            'index': hex(self.index),
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        return OutPoint(
            hex_decode(data['tx_hash']),
            int(data['index'], 16),
        )


class CellInput:
    def __init__(self, since: int, previous_output: OutPoint) -> None:
        self.since = since
        self.previous_output = previous_output

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, CellInput)
        return all([
            self.since == other.since,
            self.previous_output == other.previous_output,
        ])

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'since': hex(self.since),
            'previous_output': self.previous_output.rpc(),
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        return CellInput(
            int(data.get('since', '0x0'), 16),
            OutPoint.rpc_decode(data['previous_output']),
        )


class CellOutput:
    def __init__(self, capacity: int, lock: Script, type: typing.Optional[Script]) -> None:
        self.capacity = capacity
        self.lock = lock
        self.type = type

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, CellOutput)
        return all([
            self.capacity == other.capacity,
            self.lock == other.lock,
            self.type == other.type,
        ])

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'capacity': hex(self.capacity),
            'lock': self.lock.rpc(),
            'type': self.type.rpc() if self.type else None,
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        return CellOutput(
            int(data['capacity'], 16),
            Script.rpc_decode(data['lock']),
            Script.rpc_decode(data['type']) if data.get('type') else None,
        )


class Transaction:
    def __init__(
        self,
        inputs: typing.List[CellInput],
        outputs: typing.List[CellOutput],
        outputs_data: typing.List[bytearray],
        witnesses: typing.List[bytearray],
    ) -> None:
        self.inputs = inputs
        self.outputs = outputs
        self.outputs_data = outputs_data
        self.witnesses = witnesses

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, Transaction)
        return all([
            self.inputs == other.inputs,
            self.outputs == other.outputs,
            self.outputs_data == other.outputs_data,
            self.witnesses == other.witnesses,
        ])

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'inputs': [e.rpc() for e in self.inputs],
            'outputs': [e.rpc() for e in self.outputs],
            'outputs_data': [f'0x{e.hex()}' for e in self.outputs_data],
            'witnesses': [f'0x{e.hex()}' for e in self.witnesses],
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        return Transaction(
            [CellInput.rpc_decode(e) for e in data['inputs']],
            [CellOutput.rpc_decode(e) for e in data['outputs']],
            [hex_decode(e) for e in data['outputs_data']],
            [hex_decode(e) for e in data['witnesses']],
        )


class TxStatus:
    def __init__(self, status: str, block_hash: typing.Optional[bytearray]) -> None:
        self.status = status
        self.block_hash = block_hash

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'status': self.status,
            'block_hash': f'0x{self.block_hash.hex()}' if self.block_hash else None,
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        assert isinstance(data['status'], str)
        return TxStatus(
            data['status'],
            hex_decode(data['block_hash']) if data.get('block_hash') else None,
        )


class TransactionWithStatus:
    def __init__(self, transaction: Transaction, tx_status: TxStatus) -> None:
        self.transaction = transaction
        self.tx_status = tx_status

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'transaction': self.transaction.rpc(),
            'tx_status': self.tx_status.rpc(),
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        return TransactionWithStatus(
            Transaction.rpc_decode(data['transaction']),
            TxStatus.rpc_decode(data['tx_status']),
        )


class Header:
    def __init__(self, number: int, timestamp: int) -> None:
        self.number = number
        # Milliseconds since the unix epoch.
        self.timestamp = timestamp

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'number': hex(self.number),
            'timestamp': hex(self.timestamp),
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        return Header(
            int(data['number'], 16),
            int(data['timestamp'], 16),
        )


class LiveCell:
    def __init__(self, output: CellOutput, output_data: bytearray, out_point: OutPoint) -> None:
        self.output = output
        self.output_data = output_data
        self.out_point = out_point

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def __eq__(self, other: object) -> bool:
        assert isinstance(other, LiveCell)
        return all([
            self.output == other.output,
            self.output_data == other.output_data,
            self.out_point == other.out_point,
        ])

    def json(self) -> typing.Dict:
        return self.rpc()

    def rpc(self) -> typing.Dict:
        return {
            'output': self.output.rpc(),
            'output_data': f'0x{self.output_data.hex()}',
            'out_point': self.out_point.rpc(),
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        return LiveCell(
            CellOutput.rpc_decode(data['output']),
            hex_decode(data.get('output_data') or '0x'),
            OutPoint.rpc_decode(data['out_point']),
        )


class Page:
    # One page of an indexer query. For get_transactions the objects are transaction hashes, for get_cells they are
    # live cells.
    def __init__(self, objects: typing.List[typing.Any], last_cursor: str) -> None:
        self.objects = objects
        self.last_cursor = last_cursor

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return {
            'objects': [f'0x{e.hex()}' if isinstance(e, bytearray) else e.json() for e in self.objects],
            'last_cursor': self.last_cursor,
        }
