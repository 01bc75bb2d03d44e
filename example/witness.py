import argparse
import json
import pyfiber

# Decode the witness that unlocks a commitment cell, either given in hex or fetched by the hash of the spending
# transaction.

parser = argparse.ArgumentParser()
parser.add_argument('--hash', type=str, help='transaction hash')
parser.add_argument('--hex', type=str, help='witness')
parser.add_argument('--net', type=str, choices=['custom', 'mainnet', 'testnet'], default='testnet')
parser.add_argument('--url', type=str, help='ckb rpc url, custom net only')
parser.add_argument('--version', type=int, choices=[1, 2], default=2)
args = parser.parse_args()

assert args.hash or args.hex

if args.net == 'custom':
    pyfiber.config.custom.url = args.url
    pyfiber.config.current = pyfiber.config.custom
if args.net == 'mainnet':
    pyfiber.config.current = pyfiber.config.mainnet
if args.net == 'testnet':
    pyfiber.config.current = pyfiber.config.testnet

if args.hex:
    witness = args.hex
    version = args.version
if args.hash:
    client = pyfiber.rpc.Client()
    lock_args, witness, version = pyfiber.txmsg.fetch_and_parse(client, bytearray.fromhex(args.hash[2:]))
    print(json.dumps(pyfiber.lockargs.decode(lock_args).json(), indent=4))

print(json.dumps(pyfiber.witness.decode(witness, version).json(), indent=4))
