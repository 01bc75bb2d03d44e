import os
import subprocess
import sys

root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def call(c: str):
    env = dict(os.environ, PYTHONPATH=root)
    return subprocess.run(f'{sys.executable} {c}', check=True, shell=True, cwd=root, env=env, capture_output=True)


def test_lockargs():
    r = call('example/lockargs.py --hex 0x' + '11' * 20 + '0100000000000020' + '0100000000000000')
    assert b'"version": "1"' in r.stdout


def test_witness():
    r = call('example/witness.py --version 2 --hex 0x' + '00' * 16 + '00' + '03' + '00' * 7 + 'ab' * 32 + 'cd' * 65)
    assert b'"revocation"' in r.stdout
