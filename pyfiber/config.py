import typing


class ObjectDict(dict):
    def __getattr__(self, name: str) -> typing.Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    def __setattr__(self, name: str, value: typing.Any) -> None:
        self[name] = value


testnet = ObjectDict({
    'name': 'testnet',
    # https://github.com/nervosnetwork/ckb/wiki/Public-JSON-RPC-nodes
    'url': 'https://testnet.ckb.dev/',
    # Hash of the genesis block.
    'chain_hash': bytearray.fromhex('10639e0895502b5688a6be8cf69460d76541bfa4821629d86d62ba0aae3f9606'),
    'script': ObjectDict({
        'commitment': ObjectDict({
            'code_hash': bytearray.fromhex('740dee83f87c6f309824d8fd3fbdd3c8380ee6fc9acc90b1a748438afcdf81d8'),
        }),
    }),
    # Registered UDTs, entries in the udt_cfg_infos format of a fiber node. See pyfiber.balance.UdtInfo.
    'udt': [],
})

mainnet = ObjectDict({
    'name': 'mainnet',
    # https://github.com/nervosnetwork/ckb/wiki/Public-JSON-RPC-nodes
    'url': 'https://mainnet.ckb.dev/',
    'chain_hash': bytearray.fromhex('92b197aa1fba0f63633922c61c92375c9c074a93e85963554f5499fe1450d0e5'),
    'script': ObjectDict({
        'commitment': ObjectDict({
            'code_hash': bytearray.fromhex('2d45c4d3ed3e942f1945386ee82a5d1b7e4bb16d7fe1ab015421174ab747406c'),
        }),
    }),
    'udt': [],
})

custom = ObjectDict({
    'name': 'custom',
    'url': '',
    'chain_hash': None,
    'script': ObjectDict({
        'commitment': ObjectDict({
            'code_hash': None,
        }),
    }),
    'udt': [],
})


def detect(chain_hash: bytearray) -> ObjectDict:
    for e in [testnet, mainnet]:
        if e.chain_hash == chain_hash:
            return e
    return custom


def upgrade(url: str, commitment_code_hash: bytearray):
    assert len(commitment_code_hash) == 32
    custom.url = url
    custom.script.commitment.code_hash = commitment_code_hash


current = testnet
