"""Command line options for the file server."""

import argparse
import os
import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from fileserve import __version__

# RFC 9110 token characters
_TOKEN = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+$")


class ConfigError(ValueError):
    """Raised when the command line or the options built from it are invalid."""


class Options(BaseModel):
    """Options set for the program. Built once at startup and never changed."""

    model_config = ConfigDict(frozen=True)

    addr: str = Field(min_length=1)
    dir: str
    use_https: bool = False
    cert_file: str = ""
    key_file: str = ""
    use_cors: bool = False
    headers: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _require_tls_pair(self) -> "Options":
        if self.use_https and not (self.cert_file and self.key_file):
            raise ValueError("Missing cert or key when using secure flag.")
        return self

    @property
    def scheme(self) -> str:
        return "https" if self.use_https else "http"


def usage(prog: str = "fileserve") -> str:
    return f"""USAGE: {prog} (v{__version__}) [options] <ADDR>

ADDR: Binding address to use, can be just the port (:8000), or the IP/hostname and the port (127.0.0.1:8000) to restrict only localhost.

OPTIONS:
  -d, --dir     Directory to serve files from, defaults to the cwd
  -s, --secure  Use HTTPS. Requires cert and key pair be provided
  -c, --cert    Certificate file to use in PEM format
  -k, --key     Key file to use in PEM format
  --headers     Add extra header(s). Expected to be in name:value format and comma separated
  --cors        Add CORS header to allow calls from any origin (Access-Control-Allow-Origin: *)

EXAMPLES:
  {prog} -d public :8000
      Serve files over HTTP on any IP over port 8000 from the public directory
  {prog} -s -c cert.pem -k key.pem 127.0.0.1:443
      Serve files from cwd over for localhost only using HTTPS on port 443
  {prog} --headers 'X-Foo: Test' 192.168.1.10:8000
      Serve files from cwd on 192.168.1.10 over port 8000 with extra X-Foo HTTP header in response
"""


def parse_header_list(raw: str) -> Dict[str, str]:
    """Parse ``"n1:v1,n2:v2"`` into a header mapping.

    Each entry is split on its first colon and both sides are stripped, so
    ``"X-Foo: bar"`` gives ``{"X-Foo": "bar"}``. A later entry with the same
    name replaces the earlier one.
    """
    headers: Dict[str, str] = {}
    if not raw:
        return headers

    for entry in raw.split(","):
        name, sep, value = entry.partition(":")
        name = name.strip()
        if not sep or not _TOKEN.match(name):
            raise ConfigError("Invalid headers string was provided.")
        headers[name] = value.strip()
    return headers


def split_addr(addr: str) -> Tuple[str, int]:
    """Split ``host:port`` or ``:port`` into a (host, port) pair for binding."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit() or int(port) > 65535:
        raise ConfigError(f"Invalid ADDR {addr!r}, expected [host]:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host or "0.0.0.0", int(port)


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise ConfigError(message)


def _build_parser(cwd: str) -> argparse.ArgumentParser:
    parser = _Parser(prog="fileserve", add_help=False)
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("-d", "--dir", default=cwd)
    parser.add_argument("-s", "--secure", action="store_true")
    parser.add_argument("-c", "--cert", default="")
    parser.add_argument("-k", "--key", default="")
    parser.add_argument("--cors", action="store_true")
    parser.add_argument("--headers", default="")
    parser.add_argument("addr", nargs="?")
    return parser


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    cause = err.get("ctx", {}).get("error")
    return str(cause) if cause is not None else f"{'.'.join(map(str, err['loc']))}: {err['msg']}"


def parse_args(argv: Optional[List[str]] = None, cwd: Optional[str] = None) -> Options:
    """Build Options from the argument list (``sys.argv[1:]`` when omitted)."""
    parser = _build_parser(cwd or os.getcwd())
    args = parser.parse_args(argv)

    if args.help:
        raise ConfigError("")

    # addr not been provided
    if not args.addr:
        raise ConfigError("ADDR has not been provided.")

    headers = parse_header_list(args.headers)

    try:
        return Options(
            addr=args.addr,
            dir=args.dir,
            use_https=args.secure,
            cert_file=args.cert,
            key_file=args.key,
            use_cors=args.cors,
            headers=headers,
        )
    except ValidationError as exc:
        raise ConfigError(_first_error(exc)) from exc
