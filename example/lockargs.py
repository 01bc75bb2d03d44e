import argparse
import json
import pyfiber

# Decode the args of a commitment lock. The format version is read from the args themselves.

parser = argparse.ArgumentParser()
parser.add_argument('--hex', type=str, help='lock args')
args = parser.parse_args()

print(json.dumps(pyfiber.lockargs.decode(args.hex).json(), indent=4))
