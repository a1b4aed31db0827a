"""
Tests for the command line tool
"""
import json

import pytest

from core.document import encrypt_for_nft
from devnet import cli


def run(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


def test_keygen(capsys):
    assert run(["keygen"]) == 0
    out = capsys.readouterr().out
    assert "Fingerprint: labo:" in out
    assert "Private Key:" in out


def test_keygen_from_xrpl_seed(capsys, labo_wallet):
    assert run(["keygen", "--xrpl-seed", labo_wallet.seed]) == 0
    assert labo_wallet.public_key.upper() in capsys.readouterr().out


def test_encrypt_then_decrypt(capsys, labo):
    assert run([
        "encrypt",
        "--public-data", json.dumps({"p": "Pommes Bio", "n": "LOT-12345"}),
        "--image-link", "ipfs://examplehash",
        "--labo-public-key", labo.public_key_hex,
    ]) == 0
    sealed = json.loads(capsys.readouterr().out)

    assert run([
        "decrypt",
        "--uri-hex", sealed["uriHex"],
        "--seal-hex", sealed["sealHex"],
        "--labo-private-key", "00" + labo.private_key_hex,
    ]) == 0
    out = capsys.readouterr().out
    assert "Pommes Bio" in out
    assert "ipfs://examplehash" in out


def test_decrypt_without_key_shows_public_data_only(capsys, labo, tmp_path):
    assert run([
        "encrypt",
        "--public-data", json.dumps({"p": "Pommes Bio"}),
        "--image-link", "ipfs://examplehash",
        "--labo-public-key", labo.public_key_hex,
        "--legacy",
    ]) == 0
    sealed = json.loads(capsys.readouterr().out)
    uri_file = tmp_path / "uri.txt"
    uri_file.write_text(sealed["uriHex"])

    assert run(["decrypt", "--uri-file", str(uri_file)]) == 0
    out = capsys.readouterr().out
    assert "Pommes Bio" in out
    assert "ipfs://examplehash" not in out
    assert "(encrypted)" in out


def test_encrypt_rejects_bad_key(capsys):
    code = run([
        "encrypt",
        "--public-data", "{}",
        "--image-link", "ipfs://examplehash",
        "--labo-public-key", "nothex",
    ])
    assert code == 1
    assert "Error during encryption" in capsys.readouterr().err


def test_decrypt_broken_document(capsys):
    assert run(["decrypt", "--uri-hex", "zz"]) == 1


def test_keygen_rejects_malformed_seed(capsys):
    assert run(["keygen", "--xrpl-seed", "not-a-seed"]) == 1
    assert "Invalid XRPL seed" in capsys.readouterr().err


def test_decrypt_rejects_malformed_seed(capsys, labo, pommes):
    sealed = encrypt_for_nft(pommes, "ipfs://examplehash", labo.public_key)
    code = run([
        "decrypt",
        "--uri-hex", sealed.document,
        "--seal-hex", sealed.seal,
        "--labo-seed", "sXXXXXXXXXXXXXXXXXXXXXXXXXXX",
    ])
    assert code == 1
    assert "Invalid XRPL seed" in capsys.readouterr().err
