import ledger
import pyfiber
import pytest

alice = bytearray.fromhex('75178f34549c5fe9cd1a0c57aebd01e7ddf9249e')
bob = bytearray.fromhex('c91a0b4b7d1a1fca8bbf3f2b4e4a3d5b0d8c1f2e')
udt = ledger.script(ledger.code_hash_udt, bytearray([0x01] * 32))


def commitment_args(version: int) -> bytearray:
    data = '11' * 20 + pyfiber.uint.encode(pyfiber.uint.epoch_encode(1, 0, 1), 8) + pyfiber.uint.encode(version, 8)
    return bytearray.fromhex(data)


def revocation_witness() -> bytearray:
    return bytearray.fromhex('00' * 16 + 'ff' + pyfiber.uint.encode(3, 8) + 'ab' * 32 + 'cd' * 65)


def test_fee():
    dl = ledger.Ledger()
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(1000, ledger.script(ledger.code_hash_secp256k1, alice), None)])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(990, ledger.script(ledger.code_hash_secp256k1, bob), None)],
        block_hash=ledger.h(0xb1),
    )
    dl.add_header(ledger.h(0xb1), 0x10, 1700000000000)
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.fee == 10
    assert msg.json()['fee'] == '10'
    assert msg.udt_fee == 0
    assert msg.parsed_witness is None
    assert msg.input_cells[0].args == alice
    assert msg.input_cells[0].capacity == 1000
    assert msg.input_cells[0].lock == ledger.script(ledger.code_hash_secp256k1, alice)
    assert msg.output_cells[0].lock is None
    assert msg.balance_changes == {
        f'0x{alice.hex()}': pyfiber.txmsg.BalanceChange(-1000, 0),
        f'0x{bob.hex()}': pyfiber.txmsg.BalanceChange(990, 0),
    }
    assert msg.block_number == '16'
    assert msg.block_timestamp == pyfiber.witness.timestamp_format(1700000000000)


def test_fee_negative():
    dl = ledger.Ledger()
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(100, ledger.script(ledger.code_hash_secp256k1, alice), None)])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(150, ledger.script(ledger.code_hash_secp256k1, alice), None)],
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.fee == -50
    assert msg.block_number == 'Pending'
    assert msg.block_timestamp == ''


def test_balance_changes_break_even():
    dl = ledger.Ledger()
    lock_alice = ledger.script(ledger.code_hash_secp256k1, alice)
    lock_bob = ledger.script(ledger.code_hash_secp256k1, bob)
    dl.add_tx(ledger.h(1), [], [
        pyfiber.core.CellOutput(500, lock_alice, None),
        pyfiber.core.CellOutput(700, lock_bob, None),
    ])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0), pyfiber.core.OutPoint(ledger.h(1), 1)],
        [pyfiber.core.CellOutput(500, lock_alice, None), pyfiber.core.CellOutput(600, lock_bob, None)],
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.fee == 100
    assert list(msg.balance_changes.keys()) == [f'0x{bob.hex()}']
    assert msg.balance_changes[f'0x{bob.hex()}'].ckb == -100


def test_udt():
    dl = ledger.Ledger()
    lock_alice = ledger.script(ledger.code_hash_secp256k1, alice)
    lock_bob = ledger.script(ledger.code_hash_secp256k1, bob)
    dl.add_tx(
        ledger.h(1),
        [],
        [pyfiber.core.CellOutput(14200000000, lock_alice, udt)],
        [bytearray((100).to_bytes(16, 'little')) + bytearray([0xff] * 4)],
    )
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(14200000000, lock_bob, udt), pyfiber.core.CellOutput(0, lock_alice, None)],
        [bytearray((70).to_bytes(16, 'little')), bytearray()],
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.input_cells[0].udt_args == udt.args
    assert msg.input_cells[0].udt_capacity == 100
    assert msg.output_cells[0].udt_capacity == 70
    assert msg.output_cells[1].udt_capacity is None
    assert msg.fee == 0
    assert msg.udt_fee == 30
    assert msg.balance_changes == {
        f'0x{alice.hex()}': pyfiber.txmsg.BalanceChange(-14200000000, -100),
        f'0x{bob.hex()}': pyfiber.txmsg.BalanceChange(14200000000, 70),
    }
    assert msg.json()['output_cells'][0]['udt_capacity'] == '70'


def test_witness_first_commitment_input():
    dl = ledger.Ledger()
    lock = ledger.script(ledger.code_hash_commitment, commitment_args(1))
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(2000, lock, None), pyfiber.core.CellOutput(1000, lock, None)])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0), pyfiber.core.OutPoint(ledger.h(1), 1)],
        [pyfiber.core.CellOutput(2990, ledger.script(ledger.code_hash_secp256k1, alice), None)],
        witnesses=[revocation_witness(), bytearray.fromhex('00')],
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.parsed_witness.kind == 'revocation'
    assert msg.parsed_witness.unlock_type == 0xff
    assert msg.parsed_witness.revocation.version == 3
    assert msg.fee == 10


def test_witness_v2():
    dl = ledger.Ledger()
    lock = ledger.script(ledger.code_hash_commitment, commitment_args(2))
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(2000, lock, None)])
    witness = bytearray.fromhex('00' * 16 + '00' + pyfiber.uint.encode(3, 8) + 'ab' * 32 + 'cd' * 65)
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(1990, ledger.script(ledger.code_hash_secp256k1, alice), None)],
        witnesses=[witness],
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.parsed_witness.kind == 'revocation'
    assert msg.parsed_witness.unlock_count == 0


def test_witness_malformed():
    dl = ledger.Ledger()
    lock = ledger.script(ledger.code_hash_commitment, commitment_args(1))
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(2000, lock, None)])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(1990, ledger.script(ledger.code_hash_secp256k1, alice), None)],
        witnesses=[bytearray.fromhex('00' * 16 + '00' + '05')],
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.parsed_witness.kind == 'error'
    assert msg.fee == 10


def test_witness_missing():
    dl = ledger.Ledger()
    lock = ledger.script(ledger.code_hash_commitment, commitment_args(1))
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(2000, lock, None)])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(1990, ledger.script(ledger.code_hash_secp256k1, alice), None)],
        witnesses=[],
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.parsed_witness.kind == 'error'


def test_witness_short_lock_args():
    dl = ledger.Ledger()
    lock = ledger.script(ledger.code_hash_commitment, bytearray([0x11] * 20))
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(2000, lock, None)])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(1990, ledger.script(ledger.code_hash_secp256k1, alice), None)],
        witnesses=[revocation_witness()],
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.parsed_witness is None


def test_not_found():
    dl = ledger.Ledger()
    with pytest.raises(pyfiber.error.NotFound):
        pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(990, ledger.script(ledger.code_hash_secp256k1, bob), None)],
    )
    with pytest.raises(pyfiber.error.NotFound):
        pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))


def test_header_missing():
    dl = ledger.Ledger()
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(1000, ledger.script(ledger.code_hash_secp256k1, alice), None)])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(990, ledger.script(ledger.code_hash_secp256k1, bob), None)],
        block_hash=ledger.h(0xb1),
    )
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.block_number == 'Pending'
    assert msg.block_timestamp == ''
    dl.headers[f'0x{ledger.h(0xb1).hex()}'] = {'number': '0x10'}
    msg = pyfiber.txmsg.build(dl, ledger.code_hash_commitment, ledger.h(2))
    assert msg.block_number == 'Pending'
    assert msg.fee == 10


def test_fetch_and_parse():
    dl = ledger.Ledger()
    lock = ledger.script(ledger.code_hash_commitment, commitment_args(1))
    dl.add_tx(ledger.h(1), [], [pyfiber.core.CellOutput(2000, lock, None)])
    dl.add_tx(
        ledger.h(2),
        [pyfiber.core.OutPoint(ledger.h(1), 0)],
        [pyfiber.core.CellOutput(1990, ledger.script(ledger.code_hash_secp256k1, alice), None)],
        witnesses=[revocation_witness()],
    )
    lock_args, witness, version = pyfiber.txmsg.fetch_and_parse(dl, ledger.h(2))
    assert lock_args == f'0x{commitment_args(1).hex()}'
    assert witness == f'0x{revocation_witness().hex()}'
    assert version == 1
    assert pyfiber.witness.decode(witness, version).kind == 'revocation'
