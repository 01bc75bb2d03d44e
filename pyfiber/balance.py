import json
import pyfiber.core
import pyfiber.rpc
import typing


class UdtInfo:
    def __init__(self, name: str, script: pyfiber.core.Script) -> None:
        self.name = name
        self.script = script

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return {
            'name': self.name,
            'script': self.script.json(),
        }

    @classmethod
    def rpc_decode(cls, data: typing.Dict) -> typing.Self:
        # An entry of the udt_cfg_infos list reported by a fiber node. Extra fields such as cell_deps are ignored.
        return UdtInfo(data['name'], pyfiber.core.Script.rpc_decode(data['script']))


class UdtBalance:
    def __init__(self, name: str, type_script: pyfiber.core.Script, balance: int, cell_count: int) -> None:
        self.name = name
        self.type_script = type_script
        self.balance = balance
        self.cell_count = cell_count

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return {
            'name': self.name,
            'type_script': self.type_script.json(),
            'balance': str(self.balance),
            'cell_count': self.cell_count,
        }


class AccountBalance:
    def __init__(
        self,
        ckb_balance: int,
        ckb_cell_count: int,
        udt_balances: typing.List[UdtBalance],
        cells: typing.List[pyfiber.core.LiveCell],
    ) -> None:
        self.ckb_balance = ckb_balance
        self.ckb_cell_count = ckb_cell_count
        self.udt_balances = udt_balances
        self.cells = cells

    def __repr__(self) -> str:
        return json.dumps(self.json())

    def json(self) -> typing.Dict:
        return {
            'ckb_balance': str(self.ckb_balance),
            'ckb_cell_count': self.ckb_cell_count,
            'udt_balances': [e.json() for e in self.udt_balances],
            'cells': [e.json() for e in self.cells],
        }


def compute(cells: typing.List[pyfiber.core.LiveCell], udts: typing.List[UdtInfo]) -> AccountBalance:
    # A cell without a type script counts as plain capacity. A cell whose type script is a registered UDT adds its
    # token amount to that UDT. A cell with an unknown type script still counts as plain capacity.
    ckb_balance = 0
    ckb_cell_count = 0
    udt_balances: typing.Dict[str, UdtBalance] = {}
    for e in cells:
        udt = None
        if e.output.type:
            udt = next((u for u in udts if u.script == e.output.type), None)
        if udt is None:
            ckb_balance += e.output.capacity
            ckb_cell_count += 1
            continue
        amount = 0
        if len(e.output_data) >= 16:
            amount = int.from_bytes(e.output_data[:16], 'little')
        k = f'0x{udt.script.code_hash.hex()}:0x{udt.script.args.hex()}'
        if k not in udt_balances:
            udt_balances[k] = UdtBalance(udt.name, udt.script, 0, 0)
        udt_balances[k].balance += amount
        udt_balances[k].cell_count += 1
    return AccountBalance(ckb_balance, ckb_cell_count, list(udt_balances.values()), cells)


def fetch(client: pyfiber.rpc.Client, lock: pyfiber.core.Script, udts: typing.List[UdtInfo]) -> AccountBalance:
    # Walk every page of live cells under the lock and aggregate them at once.
    cells = list(client.get_cells_iter(pyfiber.rpc.search_key(lock, with_data=True)))
    return compute(cells, udts)
