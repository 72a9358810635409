import hashlib
from typing import Awaitable, Callable, Union

from requestguard.core.utils import maybe_await
from requestguard.exceptions import ConfigurationError

HashFunction = Callable[[str], Union[str, Awaitable[str]]]


def sha256_hex(data: str) -> str:
    """Hash a string using SHA256.

    Args:
        data: The string to hash

    Returns:
        The SHA256 hex digest of the UTF-8 encoded string
    """
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def make_hash_function(algorithm: str) -> HashFunction:
    """Build a hex-digest hash function for any hashlib algorithm.

    Args:
        algorithm: A name accepted by ``hashlib.new`` (e.g. "sha256", "blake2b")

    Returns:
        A function mapping a string to its hex digest

    Raises:
        ConfigurationError: If hashlib does not provide the algorithm
    """
    algorithm = algorithm.lower()
    if algorithm == "sha256":
        return sha256_hex
    if algorithm not in hashlib.algorithms_available:
        raise ConfigurationError(f"Unsupported hash algorithm: {algorithm}")
    # Variable-length digests have no default hexdigest size
    if algorithm.startswith("shake_"):
        raise ConfigurationError(f"Unsupported hash algorithm: {algorithm}")

    def _hash(data: str) -> str:
        return hashlib.new(algorithm, data.encode("utf-8")).hexdigest()

    _hash.__name__ = f"{algorithm}_hex"
    return _hash


async def resolve_hash(hash_function: HashFunction, data: str) -> str:
    """Call a hash function, awaiting it when it is asynchronous."""
    return await maybe_await(hash_function(data))
