"""
Genera el par de claves RSA para firmar los JWT con RS256.

    python scripts/generate_keys.py [--force]

Las claves quedan en ./keys; para HS256 basta con JWT_SECRET_KEY en el .env.
"""

import sys
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

KEYS_DIR = Path(__file__).resolve().parent.parent / "keys"


def write_key_pair(keys_dir: Path = KEYS_DIR, force: bool = False) -> bool:
    keys_dir.mkdir(exist_ok=True)
    private_path = keys_dir / "private.pem"
    public_path = keys_dir / "public.pem"

    if private_path.exists() and not force:
        print(f"Las claves ya existen en {keys_dir}. Use --force para regenerarlas.")
        return False

    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_path.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    public_path.write_bytes(
        private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )

    print(f"Clave privada: {private_path}")
    print(f"Clave pública: {public_path}")
    print("\nVariables para el .env:")
    print("   JWT_ALGORITHM=RS256")
    print(f"   JWT_PRIVATE_KEY_PATH={private_path}")
    print(f"   JWT_PUBLIC_KEY_PATH={public_path}")
    return True


if __name__ == "__main__":
    write_key_pair(force="--force" in sys.argv[1:])
