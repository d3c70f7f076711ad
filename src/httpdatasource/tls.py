"""
tls.py
------
Builds the SSL context of a read from the optional CA bundle and client
certificate/key pair.
"""
import os
import re
import ssl
import tempfile
from typing import List, Optional

from .exceptions import ConfigurationError
from .log import get_logger
from .models import TLSMaterial
from .utils.validation import validate_tls_material

logger = get_logger(__name__)

PEM_CERTIFICATE = re.compile(
    r"-----BEGIN CERTIFICATE-----\s.+?\s-----END CERTIFICATE-----", re.DOTALL
)


def split_pem_certificates(data: str) -> List[str]:
    return PEM_CERTIFICATE.findall(data)


def load_trust_pool(context: ssl.SSLContext, ca: str) -> int:
    """
    Add every CERTIFICATE block of ca to the context. Blocks that fail to
    load are skipped without error. Returns the number of blocks loaded.
    """
    loaded = 0
    for block in split_pem_certificates(ca):
        try:
            context.load_verify_locations(cadata=block)
        except (ssl.SSLError, ValueError) as e:
            logger.debug("Skipping unparseable CA certificate", error=str(e))
            continue
        loaded += 1
    return loaded


def load_client_identity(context: ssl.SSLContext, client_crt: str, client_key: str) -> None:
    # ssl only loads key pairs from files
    with tempfile.TemporaryDirectory(prefix="httpdatasource-") as tmpdir:
        crt_path = os.path.join(tmpdir, "client.crt")
        key_path = os.path.join(tmpdir, "client.key")
        with open(crt_path, "w") as f:
            f.write(client_crt)
        fd = os.open(key_path, os.O_WRONLY | os.O_CREAT, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(client_key)
        try:
            # empty password so encrypted keys fail instead of prompting
            context.load_cert_chain(crt_path, key_path, password=lambda: b"")
        except (ssl.SSLError, ValueError) as e:
            raise ConfigurationError(f"Error loading client certificates: {e}", cause=e) from e


def build_ssl_context(material: Optional[TLSMaterial] = None) -> ssl.SSLContext:
    validate_tls_material(material)
    if material is None or not material.ca:
        context = ssl.create_default_context()
    else:
        # a given CA replaces the system trust store, even when nothing loaded
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        loaded = load_trust_pool(context, material.ca)
        logger.debug("CA trust pool built", certificates=loaded)

    if material is not None and material.client_crt:
        load_client_identity(context, material.client_crt, material.client_key.get_secret_value())
        logger.debug("Client certificate loaded")
    return context
