"""
Alexa signing certificate checks.

Alexa signs every request body with the private key of a certificate it
publishes under https://s3.amazonaws.com/echo.api/. Verifying a request means:

1. the cert chain URL points at that location,
2. the fetched chain leads to a trusted root and its leaf is valid now and
   issued to echo-api.amazon.com,
3. the Signature header is an RSA PKCS#1 v1.5 / SHA-1 signature of the exact
   body bytes under the leaf's public key.
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import functools
import posixpath
import re
import time
import warnings
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence, Union

import aiohttp
import certifi
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.utils import CryptographyDeprecationWarning
from cryptography.x509.verification import PolicyBuilder, Store
from yarl import URL

from logging_setup import get_logger, Component

logger = get_logger(Component.CERTIFICATE_CHECKER)

CERT_URL_SCHEME = "https"
CERT_URL_HOST = "s3.amazonaws.com"
CERT_URL_PATH_PREFIX = "/echo.api/"
CERT_URL_PORT = 443
SIGNING_CERT_SAN = "echo-api.amazon.com"

CertFetcher = Callable[[str], Awaitable[bytes]]
TrustAnchors = Union[Store, Sequence[x509.Certificate]]

_PEM_CERTIFICATE = re.compile(
    rb"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----", re.DOTALL
)


class SignatureChecker(Protocol):
    """Given signature, cert URL and body, decide whether the body is authentic."""

    async def check(self, signature: str, cert_url: str, body: bytes) -> bool:
        ...


def parse_cert_url(raw_url: str) -> Optional[URL]:
    """Parse an absolute URL, or return None if it is not one."""
    try:
        url = URL(raw_url.strip())
    except (ValueError, TypeError):
        return None
    if not url.is_absolute() or not url.scheme or not url.host:
        return None
    return url


def is_alexa_cert_url(url: URL) -> bool:
    """Check the location rules Alexa publishes for signing certificate URLs."""
    if url.scheme.lower() != CERT_URL_SCHEME:
        return False
    if (url.host or "").lower() != CERT_URL_HOST:
        return False
    if url.port != CERT_URL_PORT:
        return False
    # normpath collapses "/echo.api/../" style escapes before the prefix check
    path = posixpath.normpath(url.raw_path) if url.raw_path else ""
    return path.startswith(CERT_URL_PATH_PREFIX)


def load_trusted_roots(path: Optional[str] = None) -> List[x509.Certificate]:
    """
    Load the CA bundle used as trust anchors (certifi's by default).

    Certificates are parsed one by one so that a single anchor the installed
    cryptography refuses (e.g. a legacy negative serial number) is skipped
    instead of failing the whole bundle.
    """
    bundle_path = path or certifi.where()
    with open(bundle_path, "rb") as f:
        bundle = f.read()

    roots: List[x509.Certificate] = []
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", CryptographyDeprecationWarning)
        for block in _PEM_CERTIFICATE.findall(bundle):
            try:
                roots.append(x509.load_pem_x509_certificate(block))
            except ValueError as e:
                logger.warning("Skipping unparseable trust anchor", bundle=bundle_path, error=str(e))
    return roots


@functools.lru_cache(maxsize=1)
def default_trust_store() -> Store:
    """The certifi trust store, parsed once per process."""
    roots = load_trusted_roots()
    logger.info("Loaded trusted roots", count=len(roots))
    return Store(roots)


async def fetch_cert_chain(url: str, timeout_seconds: float) -> bytes:
    """Download the PEM certificate chain."""
    start_ts = time.time()
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    async with aiohttp.ClientSession(timeout=timeout) as s:
        async with s.get(url) as resp:
            resp.raise_for_status()
            pem = await resp.read()
    logger.debug(
        "Fetched signing certificate chain",
        cert_url=url,
        size=len(pem),
        latency_ms=int((time.time() - start_ts) * 1000),
    )
    return pem


def verify_chain(
    chain: Sequence[x509.Certificate],
    trusted_roots: TrustAnchors,
) -> x509.Certificate:
    """
    Validate leaf + intermediates against the trust store.

    Returns the leaf certificate. Raises
    cryptography.x509.verification.VerificationError when the chain does not
    build to a trusted root, the leaf is not valid now, or the leaf is not
    issued to echo-api.amazon.com.
    """
    if not chain:
        raise ValueError("Certificate chain is empty")
    leaf, intermediates = chain[0], list(chain[1:])
    store = trusted_roots if isinstance(trusted_roots, Store) else Store(list(trusted_roots))
    verifier = (
        PolicyBuilder()
        .store(store)
        .build_server_verifier(x509.DNSName(SIGNING_CERT_SAN))
    )
    verifier.verify(leaf, intermediates)
    return leaf


def verify_body_signature(leaf: x509.Certificate, signature: str, body: bytes) -> bool:
    """Check the base64 RSA-SHA1 signature of the raw body."""
    try:
        signature_bytes = base64.b64decode(signature.strip(), validate=True)
    except (binascii.Error, ValueError):
        return False

    public_key = leaf.public_key()
    if not isinstance(public_key, rsa.RSAPublicKey):
        return False

    try:
        public_key.verify(signature_bytes, body, padding.PKCS1v15(), hashes.SHA1())
    except InvalidSignature:
        return False
    return True


def _verify_signed_body(pem: bytes, trust_store: Store, signature: str, body: bytes) -> bool:
    chain = x509.load_pem_x509_certificates(pem)
    leaf = verify_chain(chain, trust_store)
    return verify_body_signature(leaf, signature, body)


class CertificateChainChecker:
    """
    SignatureChecker backed by the real Alexa certificate chain.

    Without explicit trusted_roots the process-wide certifi store is used.
    Loading it and the chain/signature crypto run in a worker thread, so a
    timeout around check() can still interrupt the wait.
    """

    def __init__(
        self,
        timeout_seconds: float = 5.0,
        trusted_roots: Optional[TrustAnchors] = None,
        fetcher: Optional[CertFetcher] = None,
    ):
        self.timeout_seconds = timeout_seconds
        if trusted_roots is None or isinstance(trusted_roots, Store):
            self._trust_store = trusted_roots
        else:
            self._trust_store = Store(list(trusted_roots))
        self._fetcher = fetcher

    async def trust_store(self) -> Store:
        if self._trust_store is None:
            self._trust_store = await asyncio.to_thread(default_trust_store)
        return self._trust_store

    async def _fetch(self, cert_url: str) -> bytes:
        if self._fetcher is not None:
            return await self._fetcher(cert_url)
        return await fetch_cert_chain(cert_url, self.timeout_seconds)

    async def check(self, signature: str, cert_url: str, body: bytes) -> bool:
        url = parse_cert_url(cert_url)
        if url is None or not is_alexa_cert_url(url):
            return False

        pem = await self._fetch(cert_url)
        trust_store = await self.trust_store()
        return await asyncio.to_thread(_verify_signed_body, pem, trust_store, signature, body)
