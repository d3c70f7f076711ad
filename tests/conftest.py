"""Pytest configuration: structlog, test certificates and a local HTTP(S) server."""

import datetime
import ssl
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID


@pytest.fixture(autouse=True)
def configure_structlog():
    """Configure structlog for testing."""
    import structlog

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Certificates

def _key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _key_pem(key):
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()


def _cert(subject_cn, key, issuer_cert=None, issuer_key=None, is_ca=False, server=False):
    now = datetime.datetime.now(datetime.timezone.utc)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject_cn)])
    issuer = issuer_cert.subject if issuer_cert is not None else subject
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(
                (issuer_key if issuer_key is not None else key).public_key()
            ),
            critical=False,
        )
    )
    if is_ca:
        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=True, content_commitment=False, key_encipherment=False,
                data_encipherment=False, key_agreement=False, key_cert_sign=True,
                crl_sign=True, encipher_only=False, decipher_only=False,
            ),
            critical=True,
        )
    elif server:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName("localhost")]), critical=False
        ).add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
    else:
        builder = builder.add_extension(
            x509.ExtendedKeyUsage([ExtendedKeyUsageOID.CLIENT_AUTH]), critical=False
        )
    cert = builder.sign(issuer_key if issuer_key is not None else key, hashes.SHA256())
    return cert


def _cert_pem(cert):
    return cert.public_bytes(serialization.Encoding.PEM).decode()


class Certificates:
    def __init__(self):
        ca_key = _key()
        ca_cert = _cert("Test CA", ca_key, is_ca=True)
        server_key = _key()
        server_cert = _cert("localhost", server_key, ca_cert, ca_key, server=True)
        client_key = _key()
        client_cert = _cert("test-client", client_key, ca_cert, ca_key)
        other_ca_key = _key()
        other_ca_cert = _cert("Other CA", other_ca_key, is_ca=True)

        self.ca = _cert_pem(ca_cert)
        self.other_ca = _cert_pem(other_ca_cert)
        self.server_crt = _cert_pem(server_cert)
        self.server_key = _key_pem(server_key)
        self.client_crt = _cert_pem(client_cert)
        self.client_key = _key_pem(client_key)
        self.unrelated_key = _key_pem(_key())


@pytest.fixture(scope="session")
def certs():
    return Certificates()


# Server

class Handler(BaseHTTPRequestHandler):
    """
    Routes:
      /text      text/plain; charset=utf-8 body
      /json      application/json body
      /binary    application/octet-stream body
      /no-type   no Content-Type header
      /multi     repeated X-Foo header
      /status/N  status N with an error body
      /slow      sleeps before answering
      /echo      JSON echo of method, headers and body
    """

    protocol_version = "HTTP/1.1"

    def log_message(self, format, *args):
        pass

    def _reply(self, status, body=b"", headers=()):
        self.send_response(status)
        for name, value in headers:
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body and self.command != "HEAD":
            self.wfile.write(body)

    def _handle(self):
        length = int(self.headers.get("Content-Length") or 0)
        request_body = self.rfile.read(length) if length else b""
        path = self.path.split("?", 1)[0]

        if path == "/text":
            self._reply(200, b"hello", [("Content-Type", "text/plain; charset=utf-8")])
        elif path == "/json":
            self._reply(200, b'{"ok": true}', [("Content-Type", "application/json")])
        elif path == "/binary":
            self._reply(200, b"\x00\x01data", [("Content-Type", "application/octet-stream")])
        elif path == "/no-type":
            self._reply(200, b"untyped")
        elif path == "/multi":
            self._reply(
                200, b"multi",
                [("Content-Type", "text/plain"), ("X-Foo", "a"), ("X-Foo", "b")],
            )
        elif path.startswith("/status/"):
            status = int(path.rsplit("/", 1)[1])
            body = b"" if status == 204 else b"status body"
            self._reply(status, body, [("Content-Type", "text/plain")])
        elif path == "/slow":
            time.sleep(2)
            self._reply(200, b"late", [("Content-Type", "text/plain")])
        elif path == "/echo":
            import json

            payload = {
                "method": self.command,
                "headers": {k: v for k, v in self.headers.items()},
                "body": request_body.decode(),
            }
            self._reply(200, json.dumps(payload).encode(), [("Content-Type", "application/json")])
        else:
            self._reply(404, b"not found", [("Content-Type", "text/plain")])

    do_GET = do_POST = do_HEAD = do_PATCH = do_DELETE = do_PUT = _handle


def _serve(server):
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread


@pytest.fixture(scope="session")
def http_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    server.daemon_threads = True
    _serve(server)
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def _tls_server(certs, tmp_path_factory, require_client_cert):
    tmpdir = tmp_path_factory.mktemp("server-certs")
    crt = tmpdir / "server.crt"
    key = tmpdir / "server.key"
    ca = tmpdir / "ca.crt"
    crt.write_text(certs.server_crt)
    key.write_text(certs.server_key)
    ca.write_text(certs.ca)

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(str(crt), str(key))
    if require_client_cert:
        context.verify_mode = ssl.CERT_REQUIRED
        context.load_verify_locations(str(ca))

    server = ThreadingHTTPServer(("localhost", 0), Handler)
    server.daemon_threads = True
    server.socket = context.wrap_socket(server.socket, server_side=True)
    _serve(server)
    return server


@pytest.fixture(scope="session")
def https_server(certs, tmp_path_factory):
    server = _tls_server(certs, tmp_path_factory, require_client_cert=False)
    yield f"https://localhost:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.fixture(scope="session")
def mtls_server(certs, tmp_path_factory):
    server = _tls_server(certs, tmp_path_factory, require_client_cert=True)
    yield f"https://localhost:{server.server_address[1]}"
    server.shutdown()
    server.server_close()
