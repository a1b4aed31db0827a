"""
CLI tool for CertiChain semi-private NFTs.
"""
import argparse
import json
import os
import sys
import requests

# Add project root to Python path to allow absolute imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from core.document import decrypt_nft, encrypt_for_nft
from core.encryption import CipherSuite
from core.errors import CodecError
from core.identity import LaboKeyPair
from core.transaction import MintTransactionError, extract_sealed_document
from ledger.client import LedgerError, LedgerSession
from node.config import DEFAULT_RPC_URL

API_BASE_URL = "http://127.0.0.1:8000/api"


def _read_file_content(filepath: str) -> str:
    """Helper to read content from a file."""
    try:
        with open(filepath, 'r') as f:
            return f.read().strip()
    except FileNotFoundError:
        print(f"Error: File not found at {filepath}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error reading file {filepath}: {e}", file=sys.stderr)
        sys.exit(1)


def _labo_private_key(args):
    """Private key from --labo-private-key or --labo-seed, or None."""
    if getattr(args, "labo_seed", None):
        return LaboKeyPair.from_xrpl_seed(args.labo_seed).private_key
    return getattr(args, "labo_private_key", None)


def _print_decoded(decoded):
    print("--- Public Data ---")
    print(json.dumps(decoded.public_record, indent=2, ensure_ascii=False))
    print("\n--- Private Reference ---")
    if decoded.decryption_succeeded:
        print(decoded.private_reference)
    elif decoded.decryption_attempted:
        print("(encrypted - the seal could not be opened with this key)")
    else:
        print("(encrypted)")


def generate_keypair(args):
    """Generates a Labo key pair, or derives it from an XRPL secp256k1 seed."""
    if args.xrpl_seed:
        try:
            keypair = LaboKeyPair.from_xrpl_seed(args.xrpl_seed)
        except CodecError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        keypair = LaboKeyPair.generate()

    print("--- Labo Key Pair ---")
    print(f"Fingerprint: {keypair.fingerprint}")
    print(f"Public Key:  {keypair.public_key_hex}")
    print("\nIMPORTANT: Store the private key securely, it is the only way to read sealed images:")
    print(f"Private Key: {keypair.private_key_hex}")


def encrypt_document(args):
    """Encodes public data and an image link into a document and a seal."""
    try:
        public_data = json.loads(args.public_data)
    except json.JSONDecodeError:
        print("Error: Invalid JSON for public-data.", file=sys.stderr)
        return 1

    cipher = CipherSuite.OPENSSL_CBC if args.legacy else CipherSuite.AES_GCM
    try:
        sealed = encrypt_for_nft(public_data, args.image_link, args.labo_public_key, cipher=cipher)
    except CodecError as e:
        print(f"Error during encryption: {e}", file=sys.stderr)
        return 1

    print(json.dumps({"uriHex": sealed.document, "sealHex": sealed.seal}, indent=2))


def decrypt_document(args):
    """Decodes a document locally; the image link only with seal and Labo key."""
    uri_hex = args.uri_hex or _read_file_content(args.uri_file)
    try:
        decoded = decrypt_nft(uri_hex, args.seal_hex, _labo_private_key(args))
    except CodecError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _print_decoded(decoded)


def read_transaction(args):
    """Fetches a mint transaction from the ledger and decodes it."""
    try:
        with LedgerSession(args.rpc_url) as ledger:
            tx_response = ledger.fetch_transaction(args.tx_hash)
        sealed = extract_sealed_document(tx_response)
        if sealed.seal is None:
            print("Warning: no SEAL_IMG_LABO memo on this transaction.", file=sys.stderr)
        decoded = decrypt_nft(sealed.document, sealed.seal, _labo_private_key(args))
    except LedgerError as e:
        print(f"Ledger error: {e}", file=sys.stderr)
        return 1
    except (MintTransactionError, CodecError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _print_decoded(decoded)


def prepare_mint(args):
    """Asks a running node for an unsigned semi-private NFTokenMint."""
    try:
        public_data = json.loads(args.public_data)
    except json.JSONDecodeError:
        print("Error: Invalid JSON for public-data.", file=sys.stderr)
        return 1

    payload = {
        "sellerAddress": args.seller_address,
        "publicData": public_data,
        "ipfsImageLink": args.image_link,
        "laboPublicKey": args.labo_public_key
    }

    try:
        response = requests.post(f"{args.api_url}/mint/semi-private-wallet", json=payload, timeout=30)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        print(f"Error preparing mint: {e}", file=sys.stderr)
        if getattr(e, 'response', None) is not None:
            print(f"Server response: {e.response.text}", file=sys.stderr)
        return 1

    print("--- Unsigned NFTokenMint ---")
    print(json.dumps(response.json()["transaction"], indent=2))
    print("\nSign and submit it with the seller wallet.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CertiChain semi-private NFT tool.")
    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    parser_keygen = subparsers.add_parser("keygen", help="Generate a Labo secp256k1 key pair.")
    parser_keygen.add_argument("--xrpl-seed", help="Derive from an existing XRPL seed instead.")
    parser_keygen.set_defaults(func=generate_keypair)

    parser_encrypt = subparsers.add_parser("encrypt", help="Build a document and seal for a Labo.")
    parser_encrypt.add_argument("--public-data", required=True, help="JSON object of public fields.")
    parser_encrypt.add_argument("--image-link", required=True, help="Private image reference to seal.")
    parser_encrypt.add_argument("--labo-public-key", required=True)
    parser_encrypt.add_argument("--legacy", action="store_true",
                                help="Use the OpenSSL/CryptoJS cipher read by the web front end.")
    parser_encrypt.set_defaults(func=encrypt_document)

    parser_decrypt = subparsers.add_parser("decrypt", help="Decode a document locally.")
    source = parser_decrypt.add_mutually_exclusive_group(required=True)
    source.add_argument("--uri-hex")
    source.add_argument("--uri-file", help="File holding the URI hex.")
    parser_decrypt.add_argument("--seal-hex")
    _add_labo_key_arguments(parser_decrypt)
    parser_decrypt.set_defaults(func=decrypt_document)

    parser_read = subparsers.add_parser("read-tx", help="Fetch a mint from the ledger and decode it.")
    parser_read.add_argument("--tx-hash", required=True)
    parser_read.add_argument("--rpc-url", default=os.environ.get("XRPL_RPC_URL", DEFAULT_RPC_URL))
    _add_labo_key_arguments(parser_read)
    parser_read.set_defaults(func=read_transaction)

    parser_mint = subparsers.add_parser("prepare-mint", help="Get an unsigned mint from a running node.")
    parser_mint.add_argument("--seller-address", required=True)
    parser_mint.add_argument("--public-data", required=True, help="JSON lot description (productType, weight, ...).")
    parser_mint.add_argument("--image-link", required=True)
    parser_mint.add_argument("--labo-public-key", required=True)
    parser_mint.add_argument("--api-url", default=API_BASE_URL)
    parser_mint.set_defaults(func=prepare_mint)

    return parser


def _add_labo_key_arguments(parser):
    key = parser.add_mutually_exclusive_group()
    key.add_argument("--labo-private-key", help="Hex private key (the XRPL 00-prefixed form is accepted).")
    key.add_argument("--labo-seed", help="XRPL seed of the Labo wallet.")


def main(argv=None):
    args = build_parser().parse_args(argv)
    sys.exit(args.func(args) or 0)


if __name__ == "__main__":
    main()
