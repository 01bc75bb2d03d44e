import argparse
import json
import pyfiber
import sys

# Follow a channel from its funding transaction to the end of its on-chain life.

parser = argparse.ArgumentParser()
parser.add_argument('--code-hash', type=str, help='commitment lock code hash, custom net only')
parser.add_argument('--hash', type=str, help='funding transaction hash')
parser.add_argument('--net', type=str, choices=['custom', 'mainnet', 'testnet'], default='testnet')
parser.add_argument('--url', type=str, help='ckb rpc url, custom net only')
args = parser.parse_args()

if args.net == 'custom':
    pyfiber.config.upgrade(args.url, bytearray.fromhex(args.code_hash[2:]))
    pyfiber.config.current = pyfiber.config.custom
if args.net == 'mainnet':
    pyfiber.config.current = pyfiber.config.mainnet
if args.net == 'testnet':
    pyfiber.config.current = pyfiber.config.testnet

client = pyfiber.rpc.Client()
r = pyfiber.trace.trace(
    client,
    pyfiber.config.current.script.commitment.code_hash,
    bytearray.fromhex(args.hash[2:]),
    lambda n: print(f'step {n}', file=sys.stderr),
)
print(json.dumps([e.json() for e in r], indent=4))
