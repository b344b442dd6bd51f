from cryptography.fernet import Fernet, InvalidToken
from netwatch_manager.core.config import settings

# Initialize Fernet with the key from settings
fernet = Fernet(settings.ENCRYPTION_KEY.encode())


def encrypt(data: str) -> str:
    """Encrypts a string."""
    if not data:
        return data
    encrypted_data = fernet.encrypt(data.encode())
    return encrypted_data.decode()


def decrypt(encrypted_data: str) -> str:
    """Decrypts a string."""
    if not encrypted_data:
        return encrypted_data
    decrypted_data = fernet.decrypt(encrypted_data.encode())
    return decrypted_data.decode()


def decrypt_or_raw(data: str) -> str:
    """Decrypts a stored secret, falling back to the raw value for rows written before encryption."""
    try:
        return decrypt(data)
    except InvalidToken:
        return data
