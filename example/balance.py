import argparse
import json
import pyfiber

# Get the ckb and udt balance of a lock script. UDTs come from a json file holding the udt_cfg_infos of a fiber node.

parser = argparse.ArgumentParser()
parser.add_argument('--args', type=str, help='lock args')
parser.add_argument('--code-hash', type=str, help='lock code hash')
parser.add_argument('--hash-type', type=str, choices=['data', 'type', 'data1', 'data2'], default='type')
parser.add_argument('--net', type=str, choices=['custom', 'mainnet', 'testnet'], default='testnet')
parser.add_argument('--udt', type=str, help='udt_cfg_infos file')
parser.add_argument('--url', type=str, help='ckb rpc url, custom net only')
args = parser.parse_args()

if args.net == 'custom':
    pyfiber.config.custom.url = args.url
    pyfiber.config.current = pyfiber.config.custom
if args.net == 'mainnet':
    pyfiber.config.current = pyfiber.config.mainnet
if args.net == 'testnet':
    pyfiber.config.current = pyfiber.config.testnet

udts = [pyfiber.balance.UdtInfo.rpc_decode(e) for e in pyfiber.config.current.udt]
if args.udt:
    with open(args.udt) as f:
        udts.extend([pyfiber.balance.UdtInfo.rpc_decode(e) for e in json.load(f)])

lock = pyfiber.core.Script.rpc_decode({
    'code_hash': args.code_hash,
    'hash_type': args.hash_type,
    'args': args.args,
})
r = pyfiber.balance.fetch(pyfiber.rpc.Client(), lock, udts)
print(json.dumps(r.json(), indent=4))
