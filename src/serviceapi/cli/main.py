# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""ServiceApi CLI."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..config import HttpSettings, load_http_settings
from ..errors import RequestConstructionError
from ..http import create_default_http_client
from ..log import setup_logging
from ..models.request import FileEntry, Method, RequestDescriptor
from ..models.result import DispatchResult, Success
from ..runtime import ServiceApi

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONSTRUCTION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send an HTTP request built from parameters and files, print the JSON result")
    parser.add_argument("url", help="Target URL")
    parser.add_argument(
        "-X",
        "--method",
        default=Method.GET.value,
        type=str.upper,
        choices=[method.value for method in Method],
        help="HTTP method (default: GET)",
    )
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Request header, repeatable",
    )
    parser.add_argument(
        "-d",
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Request parameter, repeatable; VALUE is parsed as JSON when possible",
    )
    parser.add_argument(
        "-F",
        "--file",
        action="append",
        default=[],
        metavar="KEY=PATH",
        help="File to upload as multipart/form-data (POST/PUT), repeatable",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output the result as a JSON envelope",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG shows request phases)")
    return parser


def _split_pair(raw: str, separator: str, option: str) -> tuple[str, str]:
    key, sep, value = raw.partition(separator)
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"{option} expects KEY{separator}VALUE, got {raw!r}")
    return key, value


def _parse_param_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def build_descriptor(args: argparse.Namespace) -> RequestDescriptor:
    descriptor = RequestDescriptor(url=args.url, method=Method(args.method), timeout=args.timeout)
    for raw in args.header:
        name, value = _split_pair(raw, ":", "--header")
        descriptor.add_header(name, value.strip())
    for raw in args.param:
        key, value = _split_pair(raw, "=", "--param")
        descriptor.add_parameter(key, _parse_param_value(value))
    for raw in args.file:
        key, path = _split_pair(raw, "=", "--file")
        descriptor.add_file(FileEntry.from_path(key, path))
    return descriptor


def _print_result(result: DispatchResult, as_json: bool) -> None:
    if as_json:
        if isinstance(result, Success):
            payload = {"ok": True, "data": result.value.to_python()}
        else:
            payload = {"ok": False, "error": result.message, "category": result.category.value}
        json.dump(payload, sys.stdout, indent=2, sort_keys=True)
        sys.stdout.write("\n")
        return
    if isinstance(result, Success):
        json.dump(result.value.to_python(), sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
    else:
        print(f"Failure: {result.message}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings: HttpSettings = load_http_settings()
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    try:
        descriptor = build_descriptor(args)
    except (argparse.ArgumentTypeError, RequestConstructionError) as exc:
        parser.error(str(exc))

    with ServiceApi(create_default_http_client(settings), settings=settings) as api:
        try:
            result = api.call(descriptor)
        except RequestConstructionError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return EXIT_CONSTRUCTION_ERROR

    _print_result(result, args.json)
    return EXIT_OK if result.ok else EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
