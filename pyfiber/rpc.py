import itertools
import pyfiber.config
import pyfiber.core
import pyfiber.error
import random
import requests
import typing
from loguru import logger

# Doc: https://github.com/nervosnetwork/ckb/tree/develop/rpc


def search_key(script: pyfiber.core.Script, with_data: bool = False) -> typing.Dict:
    r = {
        'script': script.rpc(),
        'script_type': 'lock',
        'script_search_mode': 'exact',
    }
    if with_data:
        r['with_data'] = True
    return r


def decode(method: str, f: typing.Callable, data: typing.Any) -> typing.Any:
    try:
        return f(data)
    except (AssertionError, AttributeError, KeyError, TypeError, ValueError) as e:
        raise pyfiber.error.DecodeError(f'{method}: unexpected result: {e!r}') from e


class Client:
    # Subclasses may override call() to answer from somewhere other than a http endpoint.

    def __init__(self, url: typing.Optional[str] = None) -> None:
        self.url = url or pyfiber.config.current.url

    def call(self, method: str, params: typing.List) -> typing.Any:
        logger.debug(f'RPC {method} {params}')
        r = requests.post(self.url, json={
            'id': random.randint(0x00000000, 0xffffffff),
            'jsonrpc': '2.0',
            'method': method,
            'params': params,
        }).json()
        if 'error' in r:
            raise pyfiber.error.RpcError(r['error'])
        return r['result']

    def get_block_hash(self, block_number: str) -> bytearray:
        r = self.call('get_block_hash', [block_number])
        return decode('get_block_hash', pyfiber.core.hex_decode, r)

    def get_header(self, block_hash: bytearray) -> typing.Optional[pyfiber.core.Header]:
        r = self.call('get_header', [f'0x{block_hash.hex()}'])
        if r is None:
            return None
        return decode('get_header', pyfiber.core.Header.rpc_decode, r)

    def get_transaction(self, tx_hash: bytearray) -> typing.Optional[pyfiber.core.TransactionWithStatus]:
        r = self.call('get_transaction', [f'0x{tx_hash.hex()}'])
        if r is None or r.get('transaction') is None:
            return None
        return decode('get_transaction', pyfiber.core.TransactionWithStatus.rpc_decode, r)

    def get_transactions(
        self,
        search_key: typing.Dict,
        order: str = 'asc',
        limit: str = '0xff',
        after: typing.Optional[str] = None,
    ) -> pyfiber.core.Page:
        # Objects of the page are the transaction hashes, in query order.
        r = self.call('get_transactions', [search_key, order, limit, after])
        return decode('get_transactions', lambda r: pyfiber.core.Page(
            [pyfiber.core.hex_decode(e['tx_hash']) for e in r['objects']],
            r.get('last_cursor') or '',
        ), r)

    def get_cells(
        self,
        search_key: typing.Dict,
        order: str = 'asc',
        limit: str = '0x64',
        after: typing.Optional[str] = None,
    ) -> pyfiber.core.Page:
        r = self.call('get_cells', [search_key, order, limit, after])
        return decode('get_cells', lambda r: pyfiber.core.Page(
            [pyfiber.core.LiveCell.rpc_decode(e) for e in r['objects']],
            r.get('last_cursor') or '',
        ), r)

    def get_cells_iter(
        self,
        search_key: typing.Dict,
        limits: int = 256,
    ) -> typing.Generator[pyfiber.core.LiveCell, None, None]:
        cursor = None
        for _ in itertools.repeat(0):
            r = self.get_cells(search_key, 'asc', hex(limits), cursor)
            cursor = r.last_cursor
            for e in r.objects:
                yield e
            if len(r.objects) < limits or not cursor:
                break
