# Common utilities
from signedlic.common.crypto import CryptoUtils as CryptoUtils
from signedlic.common.logging_utils import setup_logger as setup_logger

__all__ = ["CryptoUtils", "setup_logger"]
